from __future__ import annotations

import argparse
from trustgraph.adapters.source.static_source_adapter import StaticAccountAdapter
from trustgraph.adapters.store.sqlite_edge_store import SqliteEdgeStore
from trustgraph.config import settings
from trustgraph.io.output_writer import write_graph_json
from trustgraph.services.trust_network_service import TrustNetworkService


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--db", default=settings.EDGE_DB_PATH, help="SQLite edge store path")
    parser.add_argument("--out", default="out", help="Output folder for graph.json")
    args = parser.parse_args()
    svc = TrustNetworkService(source=StaticAccountAdapter(), store=SqliteEdgeStore(args.db))
    nodes, edges = svc.graph()
    print("Wrote:", write_graph_json(nodes, edges, args.out))


if __name__ == "__main__":
    main()
