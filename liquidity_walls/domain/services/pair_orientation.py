from __future__ import annotations

import logging
from dataclasses import replace

from liquidity_walls.domain.entities.liquidity_distribution import LiquidityDistribution, PriceLevel
from liquidity_walls.domain.services.price_levels import sanitize_levels


logger = logging.getLogger(__name__)


def invert_float_price(price: float, *, field_name: str = "price") -> float:
    if price <= 0:
        raise ValueError(f"{field_name} must be positive.")
    return 1.0 / price


def transpose_level(level: PriceLevel) -> PriceLevel:
    return replace(
        level,
        lower_price=invert_float_price(level.upper_price, field_name="upper_price"),
        upper_price=invert_float_price(level.lower_price, field_name="lower_price"),
        token0_liquidity=level.token1_liquidity,
        token1_liquidity=level.token0_liquidity,
        side=level.side.flipped(),
    )


def transpose_distribution(distribution: LiquidityDistribution) -> LiquidityDistribution:
    """Re-express a (token0, token1) distribution as (token1, token0).

    Prices are inverted, token amounts swapped and sides flipped. Levels whose
    bounds cannot be inverted are dropped.
    """
    levels: list[PriceLevel] = []
    for level in distribution.price_levels:
        try:
            levels.append(transpose_level(level))
        except ValueError as exc:
            logger.warning("pair_orientation: dropped level dex=%s error=%s", distribution.dex, exc)
    current_price = (
        invert_float_price(distribution.current_price) if distribution.current_price > 0 else 0.0
    )
    return replace(
        distribution,
        token0=distribution.token1,
        token1=distribution.token0,
        current_price=current_price,
        price_levels=sanitize_levels(levels, context=f"transpose:{distribution.dex}"),
    )
