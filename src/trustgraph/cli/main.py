from __future__ import annotations

import argparse
import datetime as dt
import json
import sys
import time

from trustgraph.config import settings
from trustgraph.core.errors import TrustGraphError
from trustgraph.services.trust_network_service import TrustNetworkService, graph_nodes
from trustgraph.io.output_writer import write_graph_json, write_summary_md

from trustgraph.adapters.source.subgraph_adapter import SubgraphAccountAdapter
from trustgraph.adapters.source.static_source_adapter import StaticAccountAdapter
from trustgraph.adapters.store.memory_store import MemoryEdgeStore
from trustgraph.adapters.store.sqlite_edge_store import SqliteEdgeStore
from trustgraph.adapters.store.sqlite_metrics_store import SqliteMetricsStore


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="trustgraph", description="Trust network -> transfer graph sync")
    p.add_argument("--db", default=settings.EDGE_DB_PATH, help="SQLite edge store path")
    p.add_argument("--source-file", help="Read accounts from a JSON snapshot instead of the subgraph")
    p.add_argument("--graph-url", default=settings.GRAPH_API_URL, help="Subgraph GraphQL endpoint")
    p.add_argument("--out", default="out", help="Output folder")
    p.add_argument("--dry-run", action="store_true", help="Derive edges and write them without touching the store")
    p.add_argument("--export-only", action="store_true", help="Skip sync; export the stored graph")
    p.add_argument("--summary", action="store_true", help="Write summary.md alongside graph.json")
    p.add_argument("--set-transfer-metrics", metavar="JSON_FILE", help="Store a transfer metrics payload")
    p.add_argument("--show-transfer-metrics", action="store_true", help="Print the stored transfer metrics")
    return p


def _make_progress_reporter():
    start_time = time.time()

    def _ts() -> str:
        return dt.datetime.now().strftime("%H:%M:%S")

    def progress(event: str, data: dict) -> None:
        if event == "fetch":
            print(f"[{_ts()}] Fetching accounts...")
            return
        if event == "fetch_done":
            print(f"[{_ts()}] Fetched {data.get('count', 0)} account(s)")
            return
        if event == "derived":
            print(
                f"[{_ts()}] Derived {data['edges']} edge(s) from "
                f"{data['accounts']} accounts • {data['tokens']} tokens • "
                f"{data['connections']} connections"
            )
            return
        if event == "synced":
            print(
                f"[{_ts()}] Synced: +{data['added']} ~{data['updated']} "
                f"-{data['removed']} (total {data['total']})"
            )
            return
        if event == "done":
            elapsed = time.time() - start_time
            print(f"[{_ts()}] Done in {elapsed:.1f}s • {data['nodes']} nodes • {data['edges']} edges")
            return
        if event == "error":
            print(f"[{_ts()}] Error: {data.get('message', 'Unknown error')}", file=sys.stderr)

    return progress


def main() -> int:
    args = build_arg_parser().parse_args()
    progress = _make_progress_reporter()

    if args.dry_run and args.export_only:
        print("--dry-run and --export-only cannot be combined", file=sys.stderr)
        return 2

    try:
        # Ports
        if args.source_file:
            source = StaticAccountAdapter.from_json(args.source_file)
        else:
            source = SubgraphAccountAdapter(url=args.graph_url)
        metrics_only = bool(args.set_transfer_metrics or args.show_transfer_metrics)
        if args.dry_run and not metrics_only:
            # nothing is created or opened under --db
            store, metrics = MemoryEdgeStore(), None
        else:
            store = SqliteEdgeStore(args.db)
            metrics = SqliteMetricsStore(args.db)

        svc = TrustNetworkService(source=source, store=store, metrics=metrics)

        if metrics_only:
            if args.set_transfer_metrics:
                with open(args.set_transfer_metrics, "r", encoding="utf-8") as f:
                    svc.set_transfer_metrics(json.load(f))
                print(f"Stored transfer metrics from {args.set_transfer_metrics}")
            if args.show_transfer_metrics:
                print(json.dumps(svc.get_transfer_metrics(), indent=2))
            return 0

        sync_result = None
        if args.dry_run:
            derivation = svc.derive(on_progress=progress)
            edges = derivation.edges
            nodes = graph_nodes(edges)
        else:
            if not args.export_only:
                _, sync_result = svc.sync(on_progress=progress)
            nodes, edges = svc.graph()
    except (TrustGraphError, OSError, ValueError) as exc:
        progress("error", {"message": f"{exc.__class__.__name__}: {exc}"})
        return 1

    progress("done", {"nodes": len(nodes), "edges": len(edges)})

    # Outputs
    graph_path = write_graph_json(nodes, edges, args.out)
    print(f"Wrote: {graph_path}")
    if args.summary:
        summary_path = write_summary_md(nodes, edges, args.out, sync_result=sync_result)
        print(f"Wrote: {summary_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
