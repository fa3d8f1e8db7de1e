from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Set

from trustgraph.core.errors import StoreError
from trustgraph.core.log import get_logger
from trustgraph.core.models import Changeset, DerivedEdge, EdgeKey, StoredEdge, SyncResult
from trustgraph.ports.edge_store_port import EdgeStorePort

logger = get_logger(__name__)


def diff_edges(previous: Iterable[StoredEdge], edges: Iterable[DerivedEdge]) -> Changeset:
    """
    Minimal changeset turning the stored edge set into `edges`.

    Updates keep the stored id and only replace the capacity.
    """
    stored: Dict[EdgeKey, StoredEdge] = {e.key: e for e in previous}
    current: Set[EdgeKey] = set()
    changes = Changeset()

    for edge in edges:
        key = edge.key
        current.add(key)

        prev = stored.get(key)
        if prev is None:
            changes.to_add.append(edge)
        elif prev.capacity != edge.capacity:
            changes.to_update.append(replace(prev, capacity=edge.capacity))
        else:
            changes.unchanged += 1

    changes.to_remove = [e for key, e in stored.items() if key not in current]
    return changes


class EdgeSynchronizer:
    """
    Keeps the stored edge table equal to the latest derivation.

    Load, diff and write all happen inside one store transaction, so two
    concurrent runs against the same store cannot interleave their diffs.
    No retries: a failed write is rolled back and raised as StoreError.
    """

    def __init__(self, store: EdgeStorePort) -> None:
        self.store = store

    def sync(self, edges: List[DerivedEdge]) -> SyncResult:
        try:
            with self.store.transaction() as tx:
                changes = diff_edges(tx.list_edges(), edges)

                if changes.to_add:
                    tx.insert_edges(changes.to_add)
                if changes.to_update:
                    tx.update_capacities((e.id, e.capacity) for e in changes.to_update)
                if changes.to_remove:
                    tx.delete_edges(e.id for e in changes.to_remove)
        except StoreError as exc:
            logger.error("edge_sync_failed", error=str(exc), total=len(edges))
            raise

        result = SyncResult(
            added=len(changes.to_add),
            updated=len(changes.to_update),
            removed=len(changes.to_remove),
            total=len(edges),
        )
        logger.info("edges_synced", unchanged=changes.unchanged, **result.as_dict())
        return result
