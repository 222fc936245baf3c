from __future__ import annotations

from eth_utils import is_address

from liquidity_walls.domain.exceptions import InvalidAddressError


def normalize_address(value: str, *, field_name: str = "address") -> str:
    candidate = (value or "").strip()
    if not candidate.startswith("0x") or not is_address(candidate):
        raise InvalidAddressError(f"Invalid {field_name}: {value!r}")
    return candidate.lower()
