from __future__ import annotations

from typing import Dict, Iterator, List, Set, Tuple

from trustgraph.config import settings
from trustgraph.core.log import get_logger
from trustgraph.core.models import DerivedEdge, EdgeKey, Registry, TrustConnection

logger = get_logger(__name__)


class EdgeDeriver:
    """
    Turns a registry into directed, token-scoped, capacity-weighted edges.

    - A token is identified by its home account.
    - sender -> receiver exists for token T when the sender holds T and T's
      home account trusts the receiver (or the receiver is the home itself).
    - Capacity: min(trust limit, sender balance), floored to whole units.
    - Traversal order: account, then held token, then the home's connections.
      First edge per (from, to, token) wins; self-loops and zero capacities are dropped.
    """

    def __init__(self, decimals: int = settings.CAPACITY_DECIMALS) -> None:
        self._unit = 10 ** int(decimals)

    def derive(self, registry: Registry) -> List[DerivedEdge]:
        connections = self._with_ownership_connections(registry)
        trusted_by = self._index_by_truster(connections)

        edges: List[DerivedEdge] = []
        emitted: Set[EdgeKey] = set()

        for sender in registry.accounts.values():
            for token_address, balance in sender.held_tokens:
                token = registry.tokens[token_address].home_account

                for receiver, raw_capacity in self._receivers(trusted_by, token, balance):
                    if receiver == sender.address:
                        continue

                    capacity = raw_capacity // self._unit
                    if capacity == 0:
                        continue

                    key = (sender.address, receiver, token)
                    if key in emitted:
                        continue
                    emitted.add(key)

                    edges.append(
                        DerivedEdge(
                            from_address=sender.address,
                            to_address=receiver,
                            token=token,
                            capacity=capacity,
                        )
                    )

        logger.info("edges_derived", connections=len(connections), edges=len(edges))
        return edges

    # -------------------------
    # Helpers
    # -------------------------

    @staticmethod
    def _with_ownership_connections(registry: Registry) -> List[TrustConnection]:
        # Holders can always send a token back to its home account, even when
        # nobody trusts the holder (e.g. organizations).
        connections = list(registry.connections)
        for account in registry.accounts.values():
            for token_address, balance in account.held_tokens:
                connections.append(
                    TrustConnection(
                        truster=account.address,
                        trustee=registry.tokens[token_address].home_account,
                        limit=balance,
                    )
                )
        return connections

    @staticmethod
    def _index_by_truster(connections: List[TrustConnection]) -> Dict[str, List[TrustConnection]]:
        index: Dict[str, List[TrustConnection]] = {}
        for c in connections:
            index.setdefault(c.truster, []).append(c)
        return index

    @staticmethod
    def _receivers(
        trusted_by: Dict[str, List[TrustConnection]],
        token: str,
        balance: int,
    ) -> Iterator[Tuple[str, int]]:
        """(receiver, raw capacity) pairs for one held token, zero capacities skipped."""
        if balance == 0:
            return

        # the home account accepts its own token, bounded by the ownership connection (= balance)
        yield token, balance

        for c in trusted_by.get(token, ()):
            if not c.limit:
                continue
            capacity = min(c.limit, balance)
            if capacity != 0:
                yield c.trustee, capacity


def derive_edges(registry: Registry, decimals: int = settings.CAPACITY_DECIMALS) -> List[DerivedEdge]:
    return EdgeDeriver(decimals=decimals).derive(registry)
