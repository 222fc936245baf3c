from __future__ import annotations

from dataclasses import dataclass

from liquidity_walls.domain.entities.token import Token


@dataclass(frozen=True)
class Pool:
    address: str
    chain_id: int
    dex: str
    token0: Token
    token1: Token
    fee: int
    creation_block: int = 0
    creation_timestamp: int = 0
    last_updated_block: int = 0
    last_updated_timestamp: int = 0
    tick_spacing: int | None = None

    def __post_init__(self) -> None:
        if self.token0.address >= self.token1.address:
            raise ValueError(
                f"pool {self.address} tokens out of order: {self.token0.address} >= {self.token1.address}"
            )
