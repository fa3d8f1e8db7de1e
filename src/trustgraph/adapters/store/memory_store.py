from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from trustgraph.core.errors import StoreError
from trustgraph.core.models import DerivedEdge, StoredEdge
from trustgraph.ports.edge_store_port import EdgeStorePort, EdgeStoreTransaction
from trustgraph.ports.metrics_port import MetricsPort


def _ordered(rows: Dict[int, StoredEdge]) -> List[StoredEdge]:
    return sorted(rows.values(), key=lambda e: (e.from_address, e.id))


class _MemoryEdgeTransaction(EdgeStoreTransaction):
    def __init__(self, rows: Dict[int, StoredEdge], next_id: int) -> None:
        self.rows = rows
        self.next_id = next_id

    def list_edges(self) -> List[StoredEdge]:
        return _ordered(self.rows)

    def insert_edges(self, edges: Iterable[DerivedEdge]) -> None:
        keys = {e.key for e in self.rows.values()}
        for e in edges:
            if e.key in keys:
                raise StoreError(f"Duplicate edge {e.key}")
            keys.add(e.key)
            self.rows[self.next_id] = StoredEdge(
                id=self.next_id,
                from_address=e.from_address,
                to_address=e.to_address,
                token=e.token,
                capacity=e.capacity,
            )
            self.next_id += 1

    def update_capacities(self, updates: Iterable[Tuple[int, int]]) -> None:
        for edge_id, capacity in updates:
            if edge_id not in self.rows:
                raise StoreError(f"Unknown edge id {edge_id}")
            e = self.rows[edge_id]
            self.rows[edge_id] = StoredEdge(
                id=e.id,
                from_address=e.from_address,
                to_address=e.to_address,
                token=e.token,
                capacity=capacity,
            )

    def delete_edges(self, ids: Iterable[int]) -> None:
        for edge_id in ids:
            self.rows.pop(edge_id, None)


class MemoryEdgeStore(EdgeStorePort):
    """
    In-process edge store (dev/testing). Transactions work on a copy of the
    rows which replaces the live rows only when the block exits cleanly.
    """

    def __init__(self, edges: Optional[Iterable[StoredEdge]] = None) -> None:
        self._lock = threading.RLock()
        self._rows: Dict[int, StoredEdge] = {e.id: e for e in (edges or [])}
        self._next_id = max(self._rows, default=0) + 1

    def list_edges(self) -> List[StoredEdge]:
        with self._lock:
            return _ordered(self._rows)

    @contextmanager
    def transaction(self) -> Iterator[EdgeStoreTransaction]:
        with self._lock:
            tx = _MemoryEdgeTransaction(dict(self._rows), self._next_id)
            yield tx
            self._rows = tx.rows
            self._next_id = tx.next_id


class MemoryMetricsStore(MetricsPort):
    def __init__(self) -> None:
        self._payloads: Dict[str, Dict[str, Any]] = {}

    def set_metrics(self, name: str, payload: Dict[str, Any]) -> None:
        self._payloads[name] = copy.deepcopy(payload)

    def get_metrics(self, name: str) -> Optional[Dict[str, Any]]:
        payload = self._payloads.get(name)
        return copy.deepcopy(payload) if payload is not None else None
