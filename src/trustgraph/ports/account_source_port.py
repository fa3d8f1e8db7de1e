from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from trustgraph.core.dto import RawAccount


class AccountSourcePort(ABC):
    """
    Abstract Class for fetching raw account records (holdings + trust limits)
    from the trust network indexer.
    """

    @abstractmethod
    def iter_accounts(self) -> Iterable[RawAccount]:
        raise NotImplementedError
