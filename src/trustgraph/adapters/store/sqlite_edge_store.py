from __future__ import annotations

import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, List, Tuple

from trustgraph.adapters.store.sqlite_db import connect, ensure_schema
from trustgraph.core.errors import StoreError
from trustgraph.core.log import get_logger
from trustgraph.core.models import DerivedEdge, StoredEdge
from trustgraph.ports.edge_store_port import EdgeStorePort, EdgeStoreTransaction

logger = get_logger(__name__)

# keep IN (...) lists under SQLite's host parameter limit
DELETE_CHUNK_SIZE = 500

_SELECT_EDGES = (
    "SELECT id, from_address, to_address, token, capacity FROM edges "
    "ORDER BY from_address ASC, id ASC"
)


def _row_to_edge(row: sqlite3.Row) -> StoredEdge:
    return StoredEdge(
        id=int(row["id"]),
        from_address=row["from_address"],
        to_address=row["to_address"],
        token=row["token"],
        capacity=int(row["capacity"]),
    )


class _SqliteEdgeTransaction(EdgeStoreTransaction):
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def list_edges(self) -> List[StoredEdge]:
        return [_row_to_edge(r) for r in self._conn.execute(_SELECT_EDGES).fetchall()]

    def _executemany(self, sql: str, rows: List[tuple]) -> None:
        try:
            self._conn.executemany(sql, rows)
        except OverflowError as e:
            # SQLite INTEGER is 64-bit signed; derived capacities are unbounded ints
            raise StoreError(f"Capacity out of range for the edge store: {e}") from e

    def insert_edges(self, edges: Iterable[DerivedEdge]) -> None:
        now = int(time.time())
        self._executemany(
            "INSERT INTO edges (from_address, to_address, token, capacity, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            [(e.from_address, e.to_address, e.token, e.capacity, now, now) for e in edges],
        )

    def update_capacities(self, updates: Iterable[Tuple[int, int]]) -> None:
        now = int(time.time())
        self._executemany(
            "UPDATE edges SET capacity = ?, updated_at = ? WHERE id = ?",
            [(capacity, now, edge_id) for edge_id, capacity in updates],
        )

    def delete_edges(self, ids: Iterable[int]) -> None:
        ids = list(ids)
        for start in range(0, len(ids), DELETE_CHUNK_SIZE):
            chunk = ids[start:start + DELETE_CHUNK_SIZE]
            placeholders = ", ".join("?" for _ in chunk)
            self._conn.execute(f"DELETE FROM edges WHERE id IN ({placeholders})", chunk)


class SqliteEdgeStore(EdgeStorePort):
    """
    SQLite-backed edge table.

    Each transaction opens its own connection and starts with BEGIN IMMEDIATE,
    which takes the database write lock up front: concurrent synchronizer runs
    (threads or processes) queue up instead of diffing against stale reads.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        try:
            ensure_schema(self.db_path)
        except sqlite3.Error as e:
            raise StoreError(f"Could not initialize edge store at {self.db_path}: {e}") from e

    def list_edges(self) -> List[StoredEdge]:
        try:
            conn = connect(self.db_path)
            try:
                return [_row_to_edge(r) for r in conn.execute(_SELECT_EDGES).fetchall()]
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StoreError(f"Could not load edges: {e}") from e

    @contextmanager
    def transaction(self) -> Iterator[EdgeStoreTransaction]:
        try:
            conn = connect(self.db_path)
        except sqlite3.Error as e:
            raise StoreError(f"Could not open edge store: {e}") from e

        try:
            conn.execute("BEGIN IMMEDIATE")
            yield _SqliteEdgeTransaction(conn)
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            self._rollback(conn)
            raise StoreError(f"Edge store transaction failed: {e}") from e
        except BaseException:
            self._rollback(conn)
            raise
        finally:
            conn.close()

    @staticmethod
    def _rollback(conn: sqlite3.Connection) -> None:
        if not conn.in_transaction:
            return
        try:
            conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            # closing the connection discards the transaction anyway
            logger.warning("edge_store_rollback_failed", error=str(e))
