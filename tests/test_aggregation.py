from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timezone

import pytest

from liquidity_walls.domain.entities.liquidity_distribution import LiquidityDistribution, PriceLevel, Side
from liquidity_walls.domain.entities.token import Token
from liquidity_walls.domain.services.aggregation import (
    AGGREGATED_DEX,
    merge_distributions,
    rebase_distribution,
    rebucket_distribution,
    synthesize_distribution,
)


NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)
BASE = Token(address="0x" + "11" * 20, chain_id=1, symbol="TKN", name="Token", decimals=18)
WETH = Token(
    address="0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",
    chain_id=1,
    symbol="WETH",
    name="Wrapped Ether",
    decimals=18,
)
USDC = Token(
    address="0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",
    chain_id=1,
    symbol="USDC",
    name="USD Coin",
    decimals=6,
)


def _level(lower, upper, token0, token1, side=Side.BUY, source=None):
    return PriceLevel(
        lower_price=lower,
        upper_price=upper,
        token0_liquidity=token0,
        token1_liquidity=token1,
        side=side,
        timestamp=NOW,
        source=source,
    )


def _distribution(levels, current_price, dex="uniswap_v3", token0=BASE, token1=USDC):
    return LiquidityDistribution(
        token0=token0,
        token1=token1,
        current_price=current_price,
        dex=dex,
        chain_id=1,
        price_levels=levels,
        timestamp=NOW,
    )


def test_merge_uses_liquidity_weighted_current_price():
    first = _distribution([_level(9.0, 10.0, 40.0, 60.0)], current_price=10.0, dex="uniswap_v2")
    second = _distribution([_level(14.0, 15.0, 100.0, 200.0, Side.SELL)], current_price=14.0)

    merged = merge_distributions([first, second])

    assert merged.current_price == pytest.approx(13.0)
    assert merged.dex == AGGREGATED_DEX
    assert [level.source for level in merged.price_levels] == ["uniswap_v2", "uniswap_v3"]


def test_merge_with_itself_doubles_levels_and_keeps_price():
    distribution = _distribution(
        [_level(1.0, 2.0, 0.0, 5.0), _level(2.0, 3.0, 2.0, 0.0, Side.SELL)],
        current_price=2.0,
    )

    merged = merge_distributions([distribution, distribution])

    assert len(merged.price_levels) == 4
    assert merged.current_price == pytest.approx(2.0)


def test_merge_is_order_independent():
    first = _distribution([_level(1.0, 2.0, 0.0, 5.0)], current_price=2.0, dex="uniswap_v2")
    second = _distribution([_level(1.5, 2.5, 1.0, 3.0)], current_price=2.2)

    left = merge_distributions([first, second])
    right = merge_distributions([second, first])

    def key(level):
        return (level.lower_price, level.upper_price, level.token0_liquidity, level.token1_liquidity, level.source)

    assert left.current_price == pytest.approx(right.current_price)
    assert sorted(map(key, left.price_levels)) == sorted(map(key, right.price_levels))


def test_merge_without_liquidity_falls_back_to_mean_price():
    merged = merge_distributions(
        [_distribution([], current_price=10.0), _distribution([], current_price=20.0)]
    )

    assert merged.current_price == pytest.approx(15.0)


def test_merge_requires_input():
    with pytest.raises(ValueError):
        merge_distributions([])


def test_rebase_scales_prices_and_quote_amounts():
    leg = _distribution([_level(0.001, 0.0012, 0.0, 5.0)], current_price=0.0011, token1=WETH)

    rebased = rebase_distribution(leg, factor=2000.0, quote_token=USDC)

    level = rebased.price_levels[0]
    assert rebased.token1 == USDC
    assert level.lower_price == pytest.approx(2.0)
    assert level.upper_price == pytest.approx(2.4)
    assert level.token1_liquidity == pytest.approx(10000.0)
    assert level.token0_liquidity == 0.0
    assert rebased.current_price == pytest.approx(2.2)


def test_rebase_by_inverse_factor_restores_levels():
    leg = _distribution([_level(0.5, 0.75, 3.0, 0.0, Side.SELL)], current_price=0.4, token1=WETH)

    restored = rebase_distribution(
        rebase_distribution(leg, factor=1850.5, quote_token=USDC),
        factor=1 / 1850.5,
        quote_token=WETH,
    )

    level = restored.price_levels[0]
    assert level.lower_price == pytest.approx(0.5, rel=1e-12)
    assert level.upper_price == pytest.approx(0.75, rel=1e-12)
    assert level.token0_liquidity == 3.0


@pytest.mark.parametrize("factor", [0.0, -1.0, float("nan"), float("inf")])
def test_rebase_with_invalid_factor_is_empty(factor):
    leg = _distribution([_level(1.0, 2.0, 0.0, 1.0)], current_price=1.5, token1=WETH)

    rebased = rebase_distribution(leg, factor=factor, quote_token=USDC)

    assert rebased.price_levels == []


def test_rebucket_conserves_liquidity_per_source():
    merged = merge_distributions(
        [
            _distribution([_level(1.0, 3.0, 0.0, 8.0), _level(3.0, 5.0, 4.0, 0.0, Side.SELL)], 3.0),
            _distribution([_level(2.0, 2.0, 1.0, 2.0)], 2.0, dex="uniswap_v2"),
        ]
    )

    bucketed = rebucket_distribution(merged, bucket_count=8)

    def totals(levels):
        sums = defaultdict(lambda: [0.0, 0.0])
        for level in levels:
            sums[level.source][0] += level.token0_liquidity
            sums[level.source][1] += level.token1_liquidity
        return sums

    before = totals(merged.price_levels)
    after = totals(bucketed.price_levels)
    assert set(before) == set(after)
    for source, (token0, token1) in before.items():
        assert after[source][0] == pytest.approx(token0, rel=1e-9)
        assert after[source][1] == pytest.approx(token1, rel=1e-9)
    assert {(level.lower_price, level.upper_price) for level in bucketed.price_levels} <= {
        (1.0 + 0.5 * index, 1.5 + 0.5 * index) for index in range(8)
    }


def test_rebucket_places_point_level_in_its_bucket():
    distribution = _distribution([_level(1.0, 2.0, 0.0, 1.0), _level(1.6, 1.6, 2.0, 3.0)], 1.6)

    bucketed = rebucket_distribution(distribution, bucket_count=4)

    point_bucket = [level for level in bucketed.price_levels if level.lower_price == 1.5]
    assert len(point_bucket) == 1
    assert point_bucket[0].token0_liquidity == pytest.approx(2.0)
    assert point_bucket[0].token1_liquidity == pytest.approx(3.25)


def test_synthesis_bounds_crossed_level_by_bottleneck():
    base_leg = _distribution([_level(1.9, 2.1, 0.0, 50.0)], current_price=2.0, token1=WETH)
    reference_leg = _distribution(
        [_level(0.9, 1.1, 30.0, 0.0, Side.SELL)],
        current_price=1.0,
        token0=WETH,
        token1=USDC,
    )

    synthetic = synthesize_distribution(base_leg, reference_leg, bucket_count=4)

    assert synthetic.token0 == BASE
    assert synthetic.token1 == USDC
    assert synthetic.current_price == pytest.approx(2.0)
    assert min(level.lower_price for level in synthetic.price_levels) == pytest.approx(1.71)
    assert max(level.upper_price for level in synthetic.price_levels) == pytest.approx(2.31)
    assert sum(level.token0_liquidity for level in synthetic.price_levels) == pytest.approx(30.0 / 2.1)
    assert sum(level.token1_liquidity for level in synthetic.price_levels) == pytest.approx(33.0)


def test_synthesis_without_overlapping_liquidity_is_empty():
    base_leg = _distribution([_level(1.9, 2.1, 5.0, 0.0, Side.SELL)], current_price=1.0, token1=WETH)
    reference_leg = _distribution([_level(0.9, 1.1, 30.0, 0.0)], current_price=1.0, token0=WETH)

    synthetic = synthesize_distribution(base_leg, reference_leg)

    assert synthetic.price_levels == []


@pytest.mark.parametrize(
    "bad_level",
    [
        _level(float("nan"), 2.0, 1.0, 1.0),
        _level(1.0, float("inf"), 1.0, 1.0),
        _level(3.0, 2.0, 1.0, 1.0),
        _level(-2.0, 0.0, 1.0, 1.0),
        _level(1.0, 2.0, -1.0, 1.0),
        _level(1.0, 2.0, 1.0, float("nan")),
    ],
)
def test_merge_drops_invalid_levels_with_warning(caplog, bad_level):
    good = _level(1.0, 2.0, 0.0, 5.0)
    caplog.set_level(logging.WARNING)

    merged = merge_distributions(
        [
            _distribution([good], current_price=2.0, dex="uniswap_v2"),
            _distribution([bad_level], current_price=2.0),
        ],
        timestamp=NOW,
    )

    assert len(merged.price_levels) == 1
    assert merged.current_price == pytest.approx(2.0)
    assert merged.price_levels[0].source == "uniswap_v2"
    assert "dropped invalid levels" in caplog.text


def test_rebase_drops_levels_that_overflow(caplog):
    leg = _distribution(
        [_level(1.0, 2.0, 0.0, 1.0), _level(1e307, 1e308, 0.0, 1.0)],
        current_price=1.5,
        token1=WETH,
    )
    caplog.set_level(logging.WARNING)

    rebased = rebase_distribution(leg, factor=10.0, quote_token=USDC)

    assert [(level.lower_price, level.upper_price) for level in rebased.price_levels] == [(10.0, 20.0)]
    assert "dropped invalid levels" in caplog.text


def test_merge_is_associative():
    a = _distribution([_level(1.0, 2.0, 0.0, 5.0)], current_price=2.0, dex="uniswap_v2")
    b = _distribution([_level(1.5, 2.5, 1.0, 3.0)], current_price=2.2, dex="uniswap_v3")
    c = _distribution([_level(2.0, 3.0, 4.0, 0.0, Side.SELL)], current_price=1.9, dex="sushiswap")

    left = merge_distributions([merge_distributions([a, b], timestamp=NOW), c], timestamp=NOW)
    right = merge_distributions([a, merge_distributions([b, c], timestamp=NOW)], timestamp=NOW)

    def key(level):
        return (level.lower_price, level.upper_price, level.token0_liquidity, level.token1_liquidity, level.source)

    assert left.current_price == pytest.approx(right.current_price)
    assert sorted(map(key, left.price_levels)) == sorted(map(key, right.price_levels))
