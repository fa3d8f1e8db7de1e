from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, List, Set, Tuple

from trustgraph.core.dto import RawAccount, RawTrustLimit
from trustgraph.core.errors import MalformedInputError
from trustgraph.core.log import get_logger
from trustgraph.core.models import Account, Registry, Token, TrustConnection
from trustgraph.core.normalize import normalize_address, parse_amount

logger = get_logger(__name__)


class _RegistryBuilder:
    """
    Owned by a single extract() call; never shared across passes.
    """

    def __init__(self) -> None:
        self.accounts: Dict[str, Account] = {}
        self.tokens: Dict[str, Token] = {}
        self.connections: List[TrustConnection] = []

    def add_account(self, raw: RawAccount) -> None:
        address = normalize_address(raw.address)

        # first occurrence wins, for the account and everything it carries
        if address in self.accounts:
            return

        held: List[Tuple[str, int]] = []
        for holding in raw.holdings:
            token_address = normalize_address(holding.token_address)
            home_account = normalize_address(holding.token_home_address)
            balance = parse_amount(holding.balance, "balance")

            held.append((token_address, balance))
            if token_address not in self.tokens:
                self.tokens[token_address] = Token(address=token_address, home_account=home_account)

        self.accounts[address] = Account(address=address, held_tokens=tuple(held))

        self.add_connections(raw.outgoing)
        self.add_connections(raw.incoming)

    def add_connections(self, batch: Iterable[RawTrustLimit]) -> None:
        # Duplicates are only looked for inside this batch, so a pair listed
        # in one account's outgoing and another's incoming is kept twice.
        seen: Set[Tuple[str, str]] = set()
        for raw in batch:
            connection = TrustConnection(
                truster=normalize_address(raw.truster),
                trustee=normalize_address(raw.trustee),
                limit=parse_amount(raw.limit, "limit"),
            )
            if connection.key in seen:
                continue
            seen.add(connection.key)
            self.connections.append(connection)

    def build(self) -> Registry:
        return Registry(
            accounts=MappingProxyType(dict(self.accounts)),
            tokens=MappingProxyType(dict(self.tokens)),
            connections=tuple(self.connections),
        )


def extract_registry(records: Iterable[RawAccount]) -> Registry:
    """
    Fold raw account records into accounts, tokens and trust connections.

    Any malformed record (bad address, negative or non-integer amount,
    missing field) fails the whole run with MalformedInputError.
    """
    builder = _RegistryBuilder()
    for index, raw in enumerate(records):
        try:
            builder.add_account(raw)
        except MalformedInputError as exc:
            raise MalformedInputError(f"Account record #{index}: {exc}") from exc
        except (AttributeError, TypeError) as exc:
            raise MalformedInputError(f"Account record #{index} is incomplete: {exc}") from exc

    registry = builder.build()
    logger.info("registry_extracted", **registry.statistics.as_dict())
    return registry
