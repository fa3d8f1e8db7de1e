from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from trustgraph.core.dto import RawAccount
from trustgraph.core.models import AnyEdge, SyncResult
from trustgraph.io.schemas import account_to_safe_dict, graph_to_dict


def write_graph_json(
    nodes: List[str],
    edges: Sequence[AnyEdge],
    out_dir: str,
    filename: str = "graph.json",
) -> str:
    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)

    out_path = p / filename
    with out_path.open("w", encoding="utf-8") as f:
        json.dump(graph_to_dict(nodes, edges), f, indent=2)

    return str(out_path)


def write_summary_md(
    nodes: List[str],
    edges: Sequence[AnyEdge],
    out_dir: str,
    filename: str = "summary.md",
    sync_result: Optional[SyncResult] = None,
) -> str:
    """
    Short overview of the stored transfer graph.
    """
    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)

    out_path = p / filename

    def short(addr: str) -> str:
        return addr if len(addr) <= 14 else f"{addr[:10]}..."

    outgoing: Dict[str, int] = {}
    for e in edges:
        outgoing[e.from_address] = outgoing.get(e.from_address, 0) + e.capacity
    top_senders = sorted(outgoing.items(), key=lambda x: x[1], reverse=True)[:10]
    top_edges = sorted(edges, key=lambda e: e.capacity, reverse=True)[:15]

    lines = []
    lines.append("# Trust Graph Summary\n")
    lines.append(f"- Nodes: **{len(nodes)}**\n")
    lines.append(f"- Edges: **{len(edges)}**\n")
    lines.append(f"- Tokens: **{len({e.token for e in edges})}**\n")
    lines.append("\n")

    if sync_result is not None:
        lines.append("## Last Sync\n\n")
        lines.append(f"- Added: {sync_result.added}\n")
        lines.append(f"- Updated: {sync_result.updated}\n")
        lines.append(f"- Removed: {sync_result.removed}\n")
        lines.append(f"- Total: {sync_result.total}\n\n")

    lines.append("## Top 10 Senders (by summed outgoing capacity)\n\n")
    if not top_senders:
        lines.append("_The graph has no edges._\n\n")
    else:
        for addr, capacity in top_senders:
            lines.append(f"- **{capacity}** | {addr}\n")
        lines.append("\n")

    lines.append("## Largest Edges\n\n")
    if not top_edges:
        lines.append("_The graph has no edges._\n")
    else:
        for e in top_edges:
            lines.append(
                f"- **{e.capacity}** | {short(e.from_address)} -> {short(e.to_address)} "
                f"| token of {short(e.token)}\n"
            )

    with out_path.open("w", encoding="utf-8") as f:
        f.writelines(lines)

    return str(out_path)


def write_accounts_json(accounts: Iterable[RawAccount], out_path: str) -> str:
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)

    with p.open("w", encoding="utf-8") as f:
        json.dump({"safes": [account_to_safe_dict(a) for a in accounts]}, f, indent=2)

    return str(p)
