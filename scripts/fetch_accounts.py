from __future__ import annotations

import argparse
from trustgraph.adapters.source.subgraph_adapter import SubgraphAccountAdapter
from trustgraph.config import settings
from trustgraph.io.output_writer import write_accounts_json


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--output", required=True, help="Snapshot path (JSON), usable with --source-file")
    parser.add_argument("--graph-url", default=settings.GRAPH_API_URL, help="Subgraph GraphQL endpoint")
    args = parser.parse_args()
    accounts = list(SubgraphAccountAdapter(url=args.graph_url).iter_accounts())
    path = write_accounts_json(accounts, args.output)
    print(f"Wrote {len(accounts)} account(s): {path}")


if __name__ == "__main__":
    main()
