from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from liquidity_walls.domain.entities.liquidity_distribution import PriceLevel, Side
from liquidity_walls.domain.entities.pool_state import ConstantProductState


def build_constant_product_levels(
    *,
    state: ConstantProductState,
    token0_decimals: int,
    token1_decimals: int,
    timestamp: datetime,
) -> tuple[float, list[PriceLevel]]:
    if state.reserve0 <= 0 or state.reserve1 <= 0:
        return 0.0, []

    reserve0 = Decimal(state.reserve0) / (Decimal(10) ** token0_decimals)
    reserve1 = Decimal(state.reserve1) / (Decimal(10) ** token1_decimals)
    price = float(reserve1 / reserve0)
    # Reserves are usable in both directions; reported as a single point level.
    level = PriceLevel(
        lower_price=price,
        upper_price=price,
        token0_liquidity=float(reserve0),
        token1_liquidity=float(reserve1),
        side=Side.BUY,
        timestamp=timestamp,
    )
    return price, [level]
