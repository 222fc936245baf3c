from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from liquidity_walls.domain.entities.token import Token


class Side(str, Enum):
    BUY = "buy"
    SELL = "sell"

    def flipped(self) -> Side:
        return Side.SELL if self is Side.BUY else Side.BUY


def side_for_range(*, upper_price: float, current_price: float) -> Side:
    return Side.BUY if upper_price <= current_price else Side.SELL


@dataclass(frozen=True)
class PriceLevel:
    lower_price: float
    upper_price: float
    token0_liquidity: float
    token1_liquidity: float
    side: Side
    timestamp: datetime
    source: str | None = None


@dataclass(frozen=True)
class LiquidityDistribution:
    token0: Token
    token1: Token
    current_price: float
    dex: str
    chain_id: int
    price_levels: list[PriceLevel]
    timestamp: datetime


@dataclass(frozen=True)
class LiquidityWall:
    price_lower: float
    price_upper: float
    liquidity_value: float
    dex_sources: dict[str, float] = field(default_factory=dict)
    # Share of the liquidity of every wall in the same result.
    strength: float = 0.0


@dataclass(frozen=True)
class LiquidityWalls:
    token0: Token
    token1: Token
    price: float
    buy_walls: list[LiquidityWall]
    sell_walls: list[LiquidityWall]
    timestamp: datetime
