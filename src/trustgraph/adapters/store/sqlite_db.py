from __future__ import annotations

import sqlite3
from pathlib import Path

SCHEMA_EDGES = """
CREATE TABLE IF NOT EXISTS edges (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    from_address TEXT NOT NULL,
    to_address TEXT NOT NULL,
    token TEXT NOT NULL,
    capacity INTEGER NOT NULL,
    created_at INTEGER,
    updated_at INTEGER,
    UNIQUE(from_address, to_address, token)
);
CREATE INDEX IF NOT EXISTS ix_edges_from ON edges(from_address);
"""

SCHEMA_METRICS = """
CREATE TABLE IF NOT EXISTS metrics (
    name TEXT PRIMARY KEY,
    payload_json TEXT NOT NULL,
    updated_at INTEGER
);
"""

# seconds to wait for another writer's lock before failing
BUSY_TIMEOUT_SEC = 30.0


def connect(db_path: Path) -> sqlite3.Connection:
    """
    Autocommit connection; callers open transactions explicitly with BEGIN.
    """
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), timeout=BUSY_TIMEOUT_SEC, isolation_level=None)
    conn.row_factory = sqlite3.Row
    return conn


def ensure_schema(db_path: Path) -> None:
    conn = connect(db_path)
    try:
        conn.executescript(SCHEMA_EDGES + SCHEMA_METRICS)
    finally:
        conn.close()
