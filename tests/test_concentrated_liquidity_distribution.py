from __future__ import annotations

from datetime import datetime, timezone

import pytest

from liquidity_walls.domain.entities.liquidity_distribution import Side
from liquidity_walls.domain.entities.pool_state import ConcentratedLiquidityState, PopulatedTick
from liquidity_walls.domain.services.concentrated_liquidity import build_concentrated_liquidity_levels
from liquidity_walls.domain.services.univ3_math import sqrt_ratio_at_tick


NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)
# Raw liquidity whose human-scaled value is 1e18 for two 18-decimals tokens.
LIQUIDITY = 10**36


def _build(ticks, current_tick, liquidity=None, decimals=(18, 18)):
    return build_concentrated_liquidity_levels(
        state=ConcentratedLiquidityState(
            sqrt_price_x96=sqrt_ratio_at_tick(current_tick),
            tick=current_tick,
            tick_spacing=10,
            liquidity=liquidity,
            ticks=ticks,
        ),
        token0_decimals=decimals[0],
        token1_decimals=decimals[1],
        timestamp=NOW,
    )


def test_range_below_current_tick_holds_only_token1():
    ticks = [PopulatedTick(tick=-1000, liquidity_net=LIQUIDITY), PopulatedTick(tick=0, liquidity_net=-LIQUIDITY)]

    price, levels = _build(ticks, current_tick=1000, liquidity=0)

    assert price == pytest.approx(1.0001**1000, rel=1e-12)
    assert len(levels) == 1
    level = levels[0]
    assert level.side is Side.BUY
    assert level.token0_liquidity == 0.0
    assert level.token1_liquidity == pytest.approx(1e18 * (1 - 1.0001**-500), rel=1e-9)
    assert level.lower_price == pytest.approx(1.0001**-1000, rel=1e-12)
    assert level.upper_price == pytest.approx(1.0, rel=1e-12)


def test_range_above_current_tick_holds_only_token0():
    ticks = [PopulatedTick(tick=-1000, liquidity_net=LIQUIDITY), PopulatedTick(tick=0, liquidity_net=-LIQUIDITY)]

    _price, levels = _build(ticks, current_tick=-2000, liquidity=0)

    assert len(levels) == 1
    level = levels[0]
    assert level.side is Side.SELL
    assert level.token1_liquidity == 0.0
    assert level.token0_liquidity == pytest.approx(1e18 * (1.0001**500 - 1), rel=1e-9)


def test_range_containing_price_is_split_at_current_price():
    ticks = [PopulatedTick(tick=-1000, liquidity_net=LIQUIDITY), PopulatedTick(tick=1000, liquidity_net=-LIQUIDITY)]

    price, levels = _build(ticks, current_tick=0, liquidity=LIQUIDITY)

    assert price == 1.0
    assert [level.side for level in levels] == [Side.BUY, Side.SELL]
    below, above = levels
    assert below.upper_price == price
    assert above.lower_price == price
    assert below.token0_liquidity == 0.0
    assert above.token1_liquidity == 0.0
    assert below.token1_liquidity == pytest.approx(1e18 * (1 - 1.0001**-500), rel=1e-9)
    assert above.token0_liquidity == pytest.approx(1e18 * (1 - 1.0001**-500), rel=1e-9)


def test_levels_are_sorted_non_overlapping_and_on_one_side_of_price():
    ticks = [
        PopulatedTick(tick=-3000, liquidity_net=LIQUIDITY),
        PopulatedTick(tick=-1000, liquidity_net=LIQUIDITY),
        PopulatedTick(tick=500, liquidity_net=-LIQUIDITY),
        PopulatedTick(tick=2000, liquidity_net=-LIQUIDITY),
    ]

    price, levels = _build(ticks, current_tick=100, liquidity=2 * LIQUIDITY)

    assert len(levels) == 4
    for previous, current in zip(levels, levels[1:]):
        assert previous.lower_price <= current.lower_price
        assert previous.upper_price <= current.lower_price * (1 + 1e-12)
    for level in levels:
        if level.side is Side.BUY:
            assert level.upper_price <= price
            assert level.token0_liquidity == 0.0
        else:
            assert level.lower_price >= price
            assert level.token1_liquidity == 0.0


def test_partial_tick_window_is_anchored_to_active_liquidity():
    full = [
        PopulatedTick(tick=-1000, liquidity_net=LIQUIDITY),
        PopulatedTick(tick=0, liquidity_net=LIQUIDITY),
        PopulatedTick(tick=1000, liquidity_net=-2 * LIQUIDITY),
    ]
    window = full[1:]

    _, full_levels = _build(full, current_tick=500, liquidity=2 * LIQUIDITY)
    _, window_levels = _build(window, current_tick=500, liquidity=2 * LIQUIDITY)

    expected = [level for level in full_levels if level.lower_price >= 1.0 - 1e-12]
    assert len(window_levels) == len(expected) == 2
    for got, want in zip(window_levels, expected):
        assert got.token0_liquidity == pytest.approx(want.token0_liquidity, rel=1e-12)
        assert got.token1_liquidity == pytest.approx(want.token1_liquidity, rel=1e-12)


def test_pool_without_populated_ticks_is_empty():
    price, levels = _build([], current_tick=0, liquidity=LIQUIDITY)

    assert price == 1.0
    assert levels == []


def test_decimals_scale_prices_and_amounts():
    ticks = [PopulatedTick(tick=-10, liquidity_net=10**12), PopulatedTick(tick=10, liquidity_net=-(10**12))]

    price, levels = _build(ticks, current_tick=0, liquidity=10**12, decimals=(18, 6))

    assert price == pytest.approx(1e12, rel=1e-12)
    assert all(level.lower_price > 0.99e12 for level in levels)
