from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional

from trustgraph.adapters.source.subgraph_adapter import SubgraphAccountAdapter
from trustgraph.core.dto import RawAccount
from trustgraph.core.errors import DataSourceError
from trustgraph.ports.account_source_port import AccountSourcePort


class StaticAccountAdapter(AccountSourcePort):
    def __init__(self, accounts: Optional[List[RawAccount]] = None) -> None:
        self._accounts = list(accounts or [])

    @classmethod
    def from_json(cls, path: str) -> "StaticAccountAdapter":
        """
        Load a snapshot in the subgraph's shape: a list of safes, or
        {"safes": [...]} / {"data": {"safes": [...]}}.
        """
        try:
            with Path(path).open("r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as e:
            raise DataSourceError(f"Could not read account snapshot {path}: {e}") from e

        if isinstance(payload, dict):
            payload = (payload.get("data") or payload).get("safes")
        if not isinstance(payload, list):
            raise DataSourceError(f"Account snapshot {path} has no list of safes")

        return cls([SubgraphAccountAdapter.parse_safe(row) for row in payload])

    def iter_accounts(self) -> Iterable[RawAccount]:
        return list(self._accounts)
