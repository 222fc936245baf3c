from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Iterator
from dataclasses import replace
from datetime import datetime, timezone

from liquidity_walls.domain.entities.liquidity_distribution import (
    LiquidityDistribution,
    PriceLevel,
    side_for_range,
)
from liquidity_walls.domain.entities.token import Token
from liquidity_walls.domain.services.price_levels import sanitize_levels, total_liquidity


AGGREGATED_DEX = "aggregated"
DEFAULT_BUCKET_COUNT = 64


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def rebase_distribution(
    distribution: LiquidityDistribution,
    *,
    factor: float,
    quote_token: Token,
) -> LiquidityDistribution:
    """Convert a (T, Q) distribution to (T, quote) using price(Q, quote) = factor."""
    if not math.isfinite(factor) or factor <= 0:
        return replace(distribution, token1=quote_token, current_price=0.0, price_levels=[])

    levels = [
        replace(
            level,
            lower_price=level.lower_price * factor,
            upper_price=level.upper_price * factor,
            token1_liquidity=level.token1_liquidity * factor,
        )
        for level in distribution.price_levels
    ]
    return replace(
        distribution,
        token1=quote_token,
        current_price=distribution.current_price * factor,
        price_levels=sanitize_levels(levels, context=f"rebase:{distribution.dex}"),
    )


def synthesize_distribution(
    base_leg: LiquidityDistribution,
    reference_leg: LiquidityDistribution,
    *,
    bucket_count: int = DEFAULT_BUCKET_COUNT,
) -> LiquidityDistribution:
    """Cross every (T, Q) level with every (Q, quote) level into (T, quote) levels.

    The usable amount of a crossed level is bounded by min(a.token1, b.token0)
    in Q units, converted back with the two upper prices. The result is
    re-bucketed to keep the level count bounded.
    """
    current_price = base_leg.current_price * reference_leg.current_price
    levels: list[PriceLevel] = []
    for a in base_leg.price_levels:
        for b in reference_leg.price_levels:
            bottleneck = min(a.token1_liquidity, b.token0_liquidity)
            if bottleneck <= 0 or a.upper_price <= 0:
                continue
            upper = a.upper_price * b.upper_price
            levels.append(
                PriceLevel(
                    lower_price=a.lower_price * b.lower_price,
                    upper_price=upper,
                    token0_liquidity=bottleneck / a.upper_price,
                    token1_liquidity=bottleneck * b.upper_price,
                    side=side_for_range(upper_price=upper, current_price=current_price),
                    timestamp=a.timestamp,
                    source=a.source,
                )
            )

    synthetic = replace(
        base_leg,
        token1=reference_leg.token1,
        current_price=current_price,
        price_levels=sanitize_levels(levels, context=f"synthesis:{base_leg.dex}"),
    )
    return rebucket_distribution(synthetic, bucket_count=bucket_count)


def merge_distributions(
    distributions: list[LiquidityDistribution],
    *,
    timestamp: datetime | None = None,
) -> LiquidityDistribution:
    if not distributions:
        raise ValueError("merge requires at least one distribution.")

    levels: list[PriceLevel] = []
    weighted_sum = 0.0
    weight_total = 0.0
    for distribution in distributions:
        weight = total_liquidity(distribution.price_levels)
        weighted_sum += distribution.current_price * weight
        weight_total += weight
        levels.extend(
            level if level.source else replace(level, source=distribution.dex)
            for level in distribution.price_levels
        )

    if weight_total > 0:
        current_price = weighted_sum / weight_total
    else:
        current_price = sum(item.current_price for item in distributions) / len(distributions)

    first = distributions[0]
    return LiquidityDistribution(
        token0=first.token0,
        token1=first.token1,
        current_price=current_price,
        dex=AGGREGATED_DEX,
        chain_id=first.chain_id,
        price_levels=sanitize_levels(levels, context="merge"),
        timestamp=timestamp or _utcnow(),
    )


def bucket_edges(*, p_min: float, p_max: float, bucket_count: int) -> list[tuple[float, float]]:
    width = (p_max - p_min) / bucket_count
    edges = []
    for index in range(bucket_count):
        lower = p_min + width * index
        upper = p_max if index == bucket_count - 1 else p_min + width * (index + 1)
        edges.append((lower, upper))
    return edges


def bucket_shares(
    level: PriceLevel,
    *,
    p_min: float,
    p_max: float,
    bucket_count: int,
) -> Iterator[tuple[int, float]]:
    """Yield (bucket index, fraction of the level) for each overlapped bucket."""
    width = (p_max - p_min) / bucket_count
    if width <= 0:
        yield 0, 1.0
        return

    def index_of(price: float) -> int:
        return max(0, min(bucket_count - 1, int((price - p_min) / width)))

    if level.upper_price <= level.lower_price:
        yield index_of(level.lower_price), 1.0
        return

    span = level.upper_price - level.lower_price
    for index in range(index_of(level.lower_price), index_of(level.upper_price) + 1):
        lower = p_min + width * index
        upper = p_max if index == bucket_count - 1 else p_min + width * (index + 1)
        overlap = min(level.upper_price, upper) - max(level.lower_price, lower)
        if overlap > 0:
            yield index, overlap / span


def price_bounds(levels: list[PriceLevel]) -> tuple[float, float]:
    return min(level.lower_price for level in levels), max(level.upper_price for level in levels)


def rebucket_distribution(
    distribution: LiquidityDistribution,
    *,
    bucket_count: int = DEFAULT_BUCKET_COUNT,
) -> LiquidityDistribution:
    if bucket_count < 1:
        raise ValueError("bucket_count must be >= 1.")
    if not distribution.price_levels:
        return distribution

    p_min, p_max = price_bounds(distribution.price_levels)
    if p_max <= p_min:
        bucket_count = 1
    edges = bucket_edges(p_min=p_min, p_max=p_max, bucket_count=bucket_count)

    sums: dict[tuple[int, str | None], list[float]] = defaultdict(lambda: [0.0, 0.0])
    timestamps: dict[tuple[int, str | None], datetime] = {}
    for level in distribution.price_levels:
        for index, fraction in bucket_shares(level, p_min=p_min, p_max=p_max, bucket_count=bucket_count):
            key = (index, level.source)
            sums[key][0] += level.token0_liquidity * fraction
            sums[key][1] += level.token1_liquidity * fraction
            timestamps[key] = max(timestamps.get(key, level.timestamp), level.timestamp)

    levels = []
    for (index, source), (token0, token1) in sorted(sums.items(), key=lambda item: (item[0][0], item[0][1] or "")):
        lower, upper = edges[index]
        levels.append(
            PriceLevel(
                lower_price=lower,
                upper_price=upper,
                token0_liquidity=token0,
                token1_liquidity=token1,
                side=side_for_range(upper_price=upper, current_price=distribution.current_price),
                timestamp=timestamps[(index, source)],
                source=source,
            )
        )
    return replace(distribution, price_levels=levels)
