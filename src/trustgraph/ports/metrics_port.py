from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class MetricsPort(ABC):
    @abstractmethod
    def set_metrics(self, name: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_metrics(self, name: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError
