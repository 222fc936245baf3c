from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GetLiquidityWallsInput:
    token0: str
    token1: str
    chain_id: int = 1
    dex: str | None = None


@dataclass(frozen=True)
class AggregateLiquidityInput:
    base_token: str
    chain_id: int = 1
    dex: str | None = None
