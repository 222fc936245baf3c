from __future__ import annotations

from datetime import datetime, timezone

from liquidity_walls.domain.entities.liquidity_distribution import Side
from liquidity_walls.domain.entities.pool_state import ConstantProductState
from liquidity_walls.domain.services.constant_product import build_constant_product_levels


NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def test_reserves_become_single_point_level_in_human_units():
    price, levels = build_constant_product_levels(
        state=ConstantProductState(reserve0=10**21, reserve1=3 * 10**9),
        token0_decimals=18,
        token1_decimals=6,
        timestamp=NOW,
    )

    assert price == 3.0
    assert len(levels) == 1
    level = levels[0]
    assert level.lower_price == 3.0
    assert level.upper_price == 3.0
    assert level.token0_liquidity == 1000.0
    assert level.token1_liquidity == 3000.0
    assert level.side is Side.BUY
    assert level.timestamp == NOW


def test_empty_reserve0_yields_empty_distribution():
    price, levels = build_constant_product_levels(
        state=ConstantProductState(reserve0=0, reserve1=5),
        token0_decimals=18,
        token1_decimals=18,
        timestamp=NOW,
    )

    assert price == 0.0
    assert levels == []


def test_empty_reserve1_yields_empty_distribution():
    price, levels = build_constant_product_levels(
        state=ConstantProductState(reserve0=10**21, reserve1=0),
        token0_decimals=18,
        token1_decimals=6,
        timestamp=NOW,
    )

    assert price == 0.0
    assert levels == []
