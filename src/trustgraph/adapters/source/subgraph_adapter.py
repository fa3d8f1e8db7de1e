from typing import Any, Dict, Iterable, List, Optional
import requests

from trustgraph.config.settings import (
    GRAPH_API_URL,
    GRAPH_REQUESTS_PER_SEC,
    GRAPH_TIMEOUT_SEC,
    GRAPH_MAX_RETRIES,
    GRAPH_PAGE_SIZE,
    GRAPH_NESTED_LIMIT,
)

from trustgraph.adapters.source.rate_limiter import RequestThrottle, backoff_sleep
from trustgraph.core.dto import RawAccount, RawHolding, RawTrustLimit
from trustgraph.core.errors import DataSourceError, MalformedInputError, RateLimitError
from trustgraph.core.log import get_logger
from trustgraph.ports.account_source_port import AccountSourcePort

logger = get_logger(__name__)

_TRUST_FIELDS = """(first: $nested) {
    limit
    canSendToAddress
    userAddress
  }"""

SAFES_QUERY = """
query Safes($first: Int!, $nested: Int!, $lastId: String!) {
  safes(first: $first, orderBy: id, orderDirection: asc, where: { id_gt: $lastId }) {
    id
    outgoing%(trust)s
    incoming%(trust)s
    balances(first: $nested) {
      amount
      token {
        id
        owner {
          id
        }
      }
    }
  }
}
""" % {"trust": _TRUST_FIELDS}

_NESTED_LISTS = ("outgoing", "incoming", "balances")


class SubgraphAccountAdapter(AccountSourcePort):
    """
    Pages through all safes of the trust network subgraph (GraphQL over HTTP).

    Pagination is keyset based (id_gt on the last seen id), so it is not
    affected by the indexer's skip limit.
    """

    def __init__(
        self,
        url: str = GRAPH_API_URL,
        page_size: int = GRAPH_PAGE_SIZE,
        nested_limit: int = GRAPH_NESTED_LIMIT,
        requests_per_sec: float = GRAPH_REQUESTS_PER_SEC,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._url = url
        self._page_size = page_size
        self._nested_limit = nested_limit
        self._timeout = GRAPH_TIMEOUT_SEC
        self._max_retries = GRAPH_MAX_RETRIES

        self._throttle = RequestThrottle(requests_per_sec)
        self._session = session or requests.Session()

    # ---------- internal ----------

    def _call(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        last_err: Optional[Exception] = None

        for attempt in range(self._max_retries):
            try:
                self._throttle.wait()
                resp = self._session.post(
                    self._url,
                    json={"query": SAFES_QUERY, "variables": variables},
                    timeout=self._timeout,
                )
                if resp.status_code == 429:
                    raise RateLimitError("Subgraph rate limit hit")
                resp.raise_for_status()
                payload = resp.json()

                errors = payload.get("errors")
                if errors:
                    message = "; ".join(str(e.get("message", e)) for e in errors)
                    raise DataSourceError(f"Subgraph query error: {message}")

                return payload.get("data") or {}

            except (requests.RequestException, ValueError, DataSourceError) as e:
                last_err = e
                logger.warning("graph_request_retry", attempt=attempt + 1, error=str(e))
                backoff_sleep(attempt)

        raise DataSourceError(f"Subgraph failed after retries: {last_err}")

    @staticmethod
    def _trust_limits(rows: Optional[List[Dict[str, Any]]]) -> tuple:
        return tuple(
            RawTrustLimit(
                truster=r["userAddress"],
                trustee=r["canSendToAddress"],
                limit=r["limit"],
            )
            for r in (rows or [])
        )

    @classmethod
    def parse_safe(cls, row: Dict[str, Any]) -> RawAccount:
        try:
            return RawAccount(
                address=row["id"],
                holdings=tuple(
                    RawHolding(
                        token_address=b["token"]["id"],
                        token_home_address=b["token"]["owner"]["id"],
                        balance=b["amount"],
                    )
                    for b in (row.get("balances") or [])
                ),
                outgoing=cls._trust_limits(row.get("outgoing")),
                incoming=cls._trust_limits(row.get("incoming")),
            )
        except (AttributeError, KeyError, TypeError) as e:
            safe_id = row.get("id") if isinstance(row, dict) else None
            raise MalformedInputError(f"Incomplete safe record {safe_id!r}: {e!r}") from e

    def _warn_if_truncated(self, row: Dict[str, Any]) -> None:
        # nested lists are not paged; a full one may have been cut off upstream
        if not isinstance(row, dict):
            return
        for name in _NESTED_LISTS:
            items = row.get(name)
            if isinstance(items, list) and len(items) >= self._nested_limit:
                logger.warning(
                    "graph_nested_list_truncated",
                    safe=row.get("id"),
                    field=name,
                    limit=self._nested_limit,
                )

    # ---------- port methods ----------

    def iter_accounts(self) -> Iterable[RawAccount]:
        last_id = ""
        page = 1
        while True:
            data = self._call(
                {"first": self._page_size, "nested": self._nested_limit, "lastId": last_id}
            )
            rows = data.get("safes")
            if not isinstance(rows, list) or not rows:
                break

            logger.debug("graph_page_fetched", page=page, rows=len(rows))
            for r in rows:
                self._warn_if_truncated(r)
                yield self.parse_safe(r)

            if len(rows) < self._page_size:
                break
            last_id = rows[-1]["id"]
            page += 1
