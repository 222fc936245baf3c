from __future__ import annotations

from datetime import datetime
from decimal import Decimal, localcontext

from liquidity_walls.domain.entities.liquidity_distribution import PriceLevel, side_for_range
from liquidity_walls.domain.entities.pool_state import ConcentratedLiquidityState
from liquidity_walls.domain.services.price_levels import sanitize_levels
from liquidity_walls.domain.services.univ3_math import DECIMAL_PRECISION, Q96, sqrt_ratio_at_tick


def build_concentrated_liquidity_levels(
    *,
    state: ConcentratedLiquidityState,
    token0_decimals: int,
    token1_decimals: int,
    timestamp: datetime,
) -> tuple[float, list[PriceLevel]]:
    """Turn populated ticks into price levels between consecutive ticks.

    Active liquidity in each range is the running sum of liquidity_net, anchored
    to the pool's active liquidity when it is known. Ranges above the current
    price hold token0, ranges below hold token1 and the range containing the
    price is split in two at the price.
    """
    if state.sqrt_price_x96 <= 0:
        return 0.0, []

    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        scale0 = Decimal(10) ** token0_decimals
        scale1 = Decimal(10) ** token1_decimals
        decimal_adjust = Decimal(10) ** (token0_decimals - token1_decimals)

        sp = Decimal(state.sqrt_price_x96) / Q96
        current_price = float(sp * sp * decimal_adjust)

        ticks = sorted(state.ticks, key=lambda item: item.tick)
        if not ticks:
            return current_price, []

        baseline = 0
        if state.liquidity is not None:
            cumulative_at_current = sum(item.liquidity_net for item in ticks if item.tick <= state.tick)
            baseline = state.liquidity - cumulative_at_current

        def to_price(sqrt_price: Decimal) -> float:
            return float(sqrt_price * sqrt_price * decimal_adjust)

        def amount0(liquidity: int, sa: Decimal, sb: Decimal) -> float:
            return float(Decimal(liquidity) * (sb - sa) / (sa * sb) / scale0)

        def amount1(liquidity: int, sa: Decimal, sb: Decimal) -> float:
            return float(Decimal(liquidity) * (sb - sa) / scale1)

        def make_level(lower: float, upper: float, token0: float, token1: float) -> PriceLevel:
            return PriceLevel(
                lower_price=lower,
                upper_price=upper,
                token0_liquidity=token0,
                token1_liquidity=token1,
                side=side_for_range(upper_price=upper, current_price=current_price),
                timestamp=timestamp,
            )

        levels: list[PriceLevel] = []
        active = baseline
        for lower_tick, upper_tick in zip(ticks, ticks[1:]):
            active += lower_tick.liquidity_net
            if active <= 0 or lower_tick.tick == upper_tick.tick:
                continue

            sa = Decimal(sqrt_ratio_at_tick(lower_tick.tick)) / Q96
            sb = Decimal(sqrt_ratio_at_tick(upper_tick.tick)) / Q96
            price_a = to_price(sa)
            price_b = to_price(sb)

            if sp <= sa:
                levels.append(make_level(price_a, price_b, amount0(active, sa, sb), 0.0))
            elif sp >= sb:
                levels.append(make_level(price_a, price_b, 0.0, amount1(active, sa, sb)))
            else:
                levels.append(make_level(price_a, current_price, 0.0, amount1(active, sa, sp)))
                levels.append(make_level(current_price, price_b, amount0(active, sp, sb), 0.0))

    return current_price, sanitize_levels(levels, context="concentrated_liquidity")
