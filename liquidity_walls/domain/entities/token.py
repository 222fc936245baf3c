from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Token:
    address: str
    chain_id: int
    symbol: str
    name: str
    decimals: int

    def __post_init__(self) -> None:
        if not 0 <= self.decimals <= 36:
            raise ValueError(f"decimals out of range for {self.address}: {self.decimals}")


def fallback_token(*, address: str, chain_id: int) -> Token:
    return Token(
        address=address,
        chain_id=chain_id,
        symbol=f"TKN-{address[:6]}",
        name=f"Token-{address}",
        decimals=18,
    )
