import os
from dotenv import load_dotenv
load_dotenv()
# ---- Subgraph (trust network indexer) ----
GRAPH_API_URL = os.environ.get(
    "GRAPH_API_URL",
    "https://api.thegraph.com/subgraphs/name/circlesubi/circles-ubi",
)
GRAPH_REQUESTS_PER_SEC = float(os.environ.get("GRAPH_REQUESTS_PER_SEC", "2.0"))
GRAPH_TIMEOUT_SEC = int(os.environ.get("GRAPH_TIMEOUT_SEC", "30"))
GRAPH_MAX_RETRIES = int(os.environ.get("GRAPH_MAX_RETRIES", "5"))
GRAPH_PAGE_SIZE = int(os.environ.get("GRAPH_PAGE_SIZE", "1000"))
# per-safe cap on outgoing / incoming / balances (indexer default is 100)
GRAPH_NESTED_LIMIT = int(os.environ.get("GRAPH_NESTED_LIMIT", "1000"))

# ---- Edge store ----
EDGE_DB_PATH = os.environ.get("EDGE_DB_PATH", ".cache/trust_edges.db")

# ----- Capacities ------

# Token amounts carry 18 decimals; capacities are floored to whole units
CAPACITY_DECIMALS = int(os.environ.get("CAPACITY_DECIMALS", "18"))

# ----- Metrics -----
METRICS_TRANSFERS = "transfers"

# ----- Logging -----
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.environ.get("LOG_FORMAT", "json").strip().lower()
