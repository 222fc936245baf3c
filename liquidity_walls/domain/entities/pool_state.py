from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ConstantProductState:
    reserve0: int
    reserve1: int
    block_timestamp_last: int = 0


@dataclass(frozen=True)
class PopulatedTick:
    tick: int
    liquidity_net: int
    liquidity_gross: int = 0


@dataclass(frozen=True)
class ConcentratedLiquidityState:
    sqrt_price_x96: int
    tick: int
    tick_spacing: int
    liquidity: int | None = None
    ticks: list[PopulatedTick] = field(default_factory=list)
