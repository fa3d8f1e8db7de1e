from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from trustgraph.core.models import StoredEdge


class PathSolverPort(ABC):
    """
    Transfer-path (max-flow) solver over the stored trust graph.

    Expected result shape: {"transferSteps": [{"from", "to", "token", "value", ...}], ...}
    """

    @abstractmethod
    def find_transfer_steps(
        self,
        from_address: str,
        to_address: str,
        value: int,
        nodes: List[str],
        edges: List[StoredEdge],
    ) -> Dict[str, Any]:
        raise NotImplementedError
