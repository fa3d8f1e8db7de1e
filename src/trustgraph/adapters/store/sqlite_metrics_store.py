from __future__ import annotations

import json
import sqlite3
import time
from pathlib import Path
from typing import Any, Dict, Optional

from trustgraph.adapters.store.sqlite_db import connect, ensure_schema
from trustgraph.core.errors import StoreError
from trustgraph.ports.metrics_port import MetricsPort


class SqliteMetricsStore(MetricsPort):
    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        try:
            ensure_schema(self.db_path)
        except sqlite3.Error as e:
            raise StoreError(f"Could not initialize metrics store at {self.db_path}: {e}") from e

    def set_metrics(self, name: str, payload: Dict[str, Any]) -> None:
        try:
            conn = connect(self.db_path)
            try:
                conn.execute(
                    """
                    INSERT INTO metrics (name, payload_json, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(name) DO UPDATE SET
                        payload_json = excluded.payload_json,
                        updated_at = excluded.updated_at
                    """,
                    (name, json.dumps(payload), int(time.time())),
                )
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StoreError(f"Could not store metrics {name!r}: {e}") from e

    def get_metrics(self, name: str) -> Optional[Dict[str, Any]]:
        try:
            conn = connect(self.db_path)
            try:
                row = conn.execute(
                    "SELECT payload_json FROM metrics WHERE name = ?", (name,)
                ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StoreError(f"Could not load metrics {name!r}: {e}") from e

        if row is None:
            return None
        return json.loads(row["payload_json"])
