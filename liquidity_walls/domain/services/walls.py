from __future__ import annotations

from collections import defaultdict

from liquidity_walls.domain.entities.liquidity_distribution import LiquidityDistribution, LiquidityWall
from liquidity_walls.domain.services.aggregation import (
    DEFAULT_BUCKET_COUNT,
    bucket_edges,
    bucket_shares,
    price_bounds,
)


def extract_walls(
    distribution: LiquidityDistribution,
    *,
    bucket_count: int = DEFAULT_BUCKET_COUNT,
) -> tuple[list[LiquidityWall], list[LiquidityWall]]:
    """Bin a distribution into walls quoted in token1.

    token0 amounts are converted at each bin's midpoint. Bins entirely below
    the current price are buy walls, bins entirely above are sell walls and a
    bin straddling the price is discarded. Buy walls are returned nearest
    first (descending price), sell walls ascending. Each wall carries its
    share of the binned liquidity as strength.
    """
    if bucket_count < 1:
        raise ValueError("bucket_count must be >= 1.")
    if not distribution.price_levels:
        return [], []

    p_min, p_max = price_bounds(distribution.price_levels)
    if p_max <= p_min:
        bucket_count = 1
    edges = bucket_edges(p_min=p_min, p_max=p_max, bucket_count=bucket_count)

    values = [0.0] * bucket_count
    sources: list[dict[str, float]] = [defaultdict(float) for _ in range(bucket_count)]
    for level in distribution.price_levels:
        for index, fraction in bucket_shares(level, p_min=p_min, p_max=p_max, bucket_count=bucket_count):
            lower, upper = edges[index]
            midpoint = (lower + upper) / 2.0
            value = (level.token1_liquidity + level.token0_liquidity * midpoint) * fraction
            values[index] += value
            sources[index][level.source or distribution.dex] += value

    current = distribution.current_price
    total = sum(value for value in values if value > 0)
    buy_walls: list[LiquidityWall] = []
    sell_walls: list[LiquidityWall] = []
    for index, (lower, upper) in enumerate(edges):
        if values[index] <= 0:
            continue
        wall = LiquidityWall(
            price_lower=lower,
            price_upper=upper,
            liquidity_value=values[index],
            dex_sources=dict(sources[index]),
            strength=values[index] / total,
        )
        if upper <= current:
            buy_walls.append(wall)
        elif lower >= current:
            sell_walls.append(wall)

    buy_walls.sort(key=lambda wall: wall.price_upper, reverse=True)
    sell_walls.sort(key=lambda wall: wall.price_lower)
    return buy_walls, sell_walls
