from dataclasses import dataclass, field
from typing import Tuple, Union


@dataclass(frozen=True)
class RawHolding:
    token_address: str
    token_home_address: str
    balance: Union[int, str]    # raw units (18 decimals), int or decimal string


@dataclass(frozen=True)
class RawTrustLimit:
    truster: str            # userAddress in the indexer
    trustee: str            # canSendToAddress in the indexer
    limit: Union[int, str]


@dataclass(frozen=True)
class RawAccount:
    address: str
    holdings: Tuple[RawHolding, ...] = field(default_factory=tuple)
    outgoing: Tuple[RawTrustLimit, ...] = field(default_factory=tuple)
    incoming: Tuple[RawTrustLimit, ...] = field(default_factory=tuple)
