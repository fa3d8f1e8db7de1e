from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Tuple, Union


EdgeKey = Tuple[str, str, str]


# Registry models (scratch state of one derivation pass)

@dataclass(frozen=True)
class Account:

    address: str
    held_tokens: Tuple[Tuple[str, int], ...] = ()     # (token_address, balance)


@dataclass(frozen=True)
class Token:

    address: str
    home_account: str


@dataclass(frozen=True)
class TrustConnection:

    truster: str
    trustee: str
    limit: int

    @property
    def key(self) -> Tuple[str, str]:
        return (self.truster, self.trustee)


@dataclass(frozen=True)
class RegistryStats:

    accounts: int
    connections: int
    tokens: int

    def as_dict(self) -> Dict[str, int]:
        return {
            "accounts": self.accounts,
            "connections": self.connections,
            "tokens": self.tokens,
        }


@dataclass(frozen=True)
class Registry:
    """
    Finished extractor output: accounts and tokens indexed by address,
    connections in registration order.
    """

    accounts: Mapping[str, Account]
    tokens: Mapping[str, Token]
    connections: Tuple[TrustConnection, ...]

    @property
    def statistics(self) -> RegistryStats:
        return RegistryStats(
            accounts=len(self.accounts),
            connections=len(self.connections),
            tokens=len(self.tokens),
        )



# Edge models

@dataclass(frozen=True)
class DerivedEdge:

    from_address: str
    to_address: str
    token: str              # home account of the token, not the token contract
    capacity: int

    @property
    def key(self) -> EdgeKey:
        return (self.from_address, self.to_address, self.token)


@dataclass(frozen=True)
class StoredEdge:

    id: int
    from_address: str
    to_address: str
    token: str
    capacity: int

    @property
    def key(self) -> EdgeKey:
        return (self.from_address, self.to_address, self.token)


AnyEdge = Union[DerivedEdge, StoredEdge]



# Results

@dataclass(frozen=True)
class DerivationResult:

    statistics: RegistryStats
    edges: List[DerivedEdge]


@dataclass
class Changeset:

    to_add: List[DerivedEdge] = field(default_factory=list)
    to_update: List[StoredEdge] = field(default_factory=list)
    to_remove: List[StoredEdge] = field(default_factory=list)
    unchanged: int = 0

    @property
    def is_empty(self) -> bool:
        return not (self.to_add or self.to_update or self.to_remove)


@dataclass(frozen=True)
class SyncResult:

    added: int
    updated: int
    removed: int
    total: int

    def as_dict(self) -> Dict[str, int]:
        return {
            "added": self.added,
            "updated": self.updated,
            "removed": self.removed,
            "total": self.total,
        }
