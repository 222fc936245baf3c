from __future__ import annotations

import logging
import math

from liquidity_walls.domain.entities.liquidity_distribution import PriceLevel


logger = logging.getLogger(__name__)


def is_valid_level(level: PriceLevel) -> bool:
    values = (
        level.lower_price,
        level.upper_price,
        level.token0_liquidity,
        level.token1_liquidity,
    )
    if not all(math.isfinite(value) for value in values):
        return False
    if level.lower_price <= 0 or level.upper_price < level.lower_price:
        return False
    return level.token0_liquidity >= 0 and level.token1_liquidity >= 0


def sanitize_levels(levels: list[PriceLevel], *, context: str = "") -> list[PriceLevel]:
    valid = [level for level in levels if is_valid_level(level)]
    dropped = len(levels) - len(valid)
    if dropped:
        logger.warning("price_levels: dropped invalid levels count=%s context=%s", dropped, context)
    valid.sort(key=lambda level: (level.lower_price, level.upper_price))
    return valid


def total_liquidity(levels: list[PriceLevel]) -> float:
    return sum(level.token0_liquidity + level.token1_liquidity for level in levels if is_valid_level(level))
