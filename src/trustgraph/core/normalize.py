from __future__ import annotations

from typing import Any

from eth_utils import is_address, to_checksum_address

from trustgraph.core.errors import MalformedInputError


def normalize_address(value: Any) -> str:
    """
    Canonical (EIP-55 checksummed) form of an account or token address.

    Raises MalformedInputError for anything that is not a 20-byte hex address.
    """
    if not isinstance(value, str) or not is_address(value):
        raise MalformedInputError(f"Invalid address: {value!r}")
    return to_checksum_address(value)


def parse_amount(value: Any, field_name: str = "amount") -> int:
    """
    Parse a full-precision token amount (wei-like integer, given as int or
    decimal string). Negative and fractional values are rejected.
    """
    if isinstance(value, bool):
        raise MalformedInputError(f"Invalid {field_name}: {value!r}")
    if isinstance(value, int):
        amount = value
    elif isinstance(value, str) and value.strip().isdecimal():
        amount = int(value.strip())
    else:
        raise MalformedInputError(f"Invalid {field_name}: {value!r}")
    if amount < 0:
        raise MalformedInputError(f"Negative {field_name}: {value!r}")
    return amount
