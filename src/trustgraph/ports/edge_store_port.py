from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ContextManager, Iterable, List, Tuple

from trustgraph.core.models import DerivedEdge, StoredEdge


class EdgeStoreTransaction(ABC):
    """
    Write handle valid inside one store transaction. Everything done through
    it is committed together or rolled back together.
    """

    @abstractmethod
    def list_edges(self) -> List[StoredEdge]:
        raise NotImplementedError

    @abstractmethod
    def insert_edges(self, edges: Iterable[DerivedEdge]) -> None:
        raise NotImplementedError

    # (id, capacity) pairs
    @abstractmethod
    def update_capacities(self, updates: Iterable[Tuple[int, int]]) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete_edges(self, ids: Iterable[int]) -> None:
        raise NotImplementedError


class EdgeStorePort(ABC):

    # --- read side (ordered by from address) ---

    @abstractmethod
    def list_edges(self) -> List[StoredEdge]:
        raise NotImplementedError

    # --- all-or-nothing writes; concurrent transactions are serialized ---

    @abstractmethod
    def transaction(self) -> ContextManager[EdgeStoreTransaction]:
        raise NotImplementedError
