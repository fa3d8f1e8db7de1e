from __future__ import annotations

from typing import Any, Dict, Iterable, List

from trustgraph.core.dto import RawAccount, RawTrustLimit
from trustgraph.core.models import AnyEdge


def edge_to_dict(e: AnyEdge) -> Dict[str, Any]:
    return {
        "from": e.from_address,
        "to": e.to_address,
        "token": e.token,
        "capacity": e.capacity,
    }


def graph_to_dict(nodes: List[str], edges: Iterable[AnyEdge]) -> Dict[str, Any]:
    # the shape the path solver consumes
    return {
        "nodes": list(nodes),
        "edges": [edge_to_dict(e) for e in edges],
    }


def account_to_safe_dict(a: RawAccount) -> Dict[str, Any]:
    # inverse of SubgraphAccountAdapter.parse_safe; amounts as strings for precision
    def trust(rows: Iterable[RawTrustLimit]) -> List[Dict[str, Any]]:
        return [
            {"userAddress": t.truster, "canSendToAddress": t.trustee, "limit": str(t.limit)}
            for t in rows
        ]

    return {
        "id": a.address,
        "outgoing": trust(a.outgoing),
        "incoming": trust(a.incoming),
        "balances": [
            {
                "amount": str(h.balance),
                "token": {"id": h.token_address, "owner": {"id": h.token_home_address}},
            }
            for h in a.holdings
        ],
    }
