from __future__ import annotations

from datetime import datetime, timezone

import pytest

from liquidity_walls.application.dto.liquidity_walls import GetLiquidityWallsInput
from liquidity_walls.application.use_cases.get_liquidity_walls import GetLiquidityWallsUseCase
from liquidity_walls.domain.entities.liquidity_distribution import LiquidityDistribution, PriceLevel, Side
from liquidity_walls.domain.entities.routing import (
    DEFAULT_ROUTING_TOKENS,
    MAINNET_ROUTING_TOKENS,
    POLYGON_ROUTING_TOKENS,
)
from liquidity_walls.domain.entities.token import Token
from liquidity_walls.domain.exceptions import (
    DistributionNotFoundError,
    InvalidAddressError,
    TokenNotFoundError,
    UnknownDexError,
)


NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)
BASE = Token(address="0x" + "11" * 20, chain_id=1, symbol="TKN", name="Token", decimals=18)
OTHER = Token(address="0x" + "22" * 20, chain_id=1, symbol="OTH", name="Other", decimals=18)
USDC = MAINNET_ROUTING_TOKENS.usdc


class FakeStore:
    def __init__(self, distributions=(), tokens=()):
        self._distributions = {
            (item.token0.address, item.token1.address, item.dex, item.chain_id): item for item in distributions
        }
        self._tokens = {(token.address, token.chain_id): token for token in tokens}

    def get(self, *, token0, token1, dex, chain_id):
        return self._distributions.get((token0, token1, dex, chain_id))

    def get_token(self, *, address, chain_id):
        return self._tokens.get((address, chain_id))


class FakeAggregator:
    def __init__(self, distribution: LiquidityDistribution):
        self._distribution = distribution
        self.commands = []

    def execute(self, command):
        self.commands.append(command)
        return self._distribution


def _distribution(token0, token1, current_price, dex="uniswap_v2"):
    levels = [
        PriceLevel(
            lower_price=current_price - 1.0,
            upper_price=current_price,
            token0_liquidity=0.0,
            token1_liquidity=50.0,
            side=Side.BUY,
            timestamp=NOW,
        ),
        PriceLevel(
            lower_price=current_price,
            upper_price=current_price + 1.0,
            token0_liquidity=2.0,
            token1_liquidity=0.0,
            side=Side.SELL,
            timestamp=NOW,
        ),
    ]
    return LiquidityDistribution(
        token0=token0,
        token1=token1,
        current_price=current_price,
        dex=dex,
        chain_id=1,
        price_levels=levels,
        timestamp=NOW,
    )


def _use_case(store, aggregator=None, wall_count=2):
    return GetLiquidityWallsUseCase(
        store=store,
        aggregator=aggregator or FakeAggregator(_distribution(BASE, USDC, 10.0, dex="aggregated")),
        routing_tokens=DEFAULT_ROUTING_TOKENS,
        dex_names=("uniswap_v2", "uniswap_v3"),
        wall_count=wall_count,
    )


def test_usdc_quote_goes_through_aggregator():
    aggregator = FakeAggregator(_distribution(BASE, USDC, 10.0, dex="aggregated"))
    store = FakeStore(tokens=[BASE, USDC])

    result = _use_case(store, aggregator).execute(
        GetLiquidityWallsInput(token0=BASE.address, token1=USDC.address, dex="uniswap_v3")
    )

    assert aggregator.commands[0].base_token == BASE.address
    assert aggregator.commands[0].dex == "uniswap_v3"
    assert result.price == 10.0
    assert result.token0 == BASE
    assert len(result.buy_walls) == 1
    assert len(result.sell_walls) == 1
    assert result.buy_walls[0].liquidity_value == pytest.approx(50.0)
    assert result.sell_walls[0].liquidity_value == pytest.approx(2.0 * 10.5)


def test_non_usdc_quote_merges_direct_pair_distributions():
    store = FakeStore(
        distributions=[_distribution(BASE, OTHER, 4.0), _distribution(BASE, OTHER, 4.0, dex="uniswap_v3")],
        tokens=[BASE, OTHER],
    )

    result = _use_case(store).execute(GetLiquidityWallsInput(token0=BASE.address, token1=OTHER.address))

    assert result.price == pytest.approx(4.0)
    assert result.buy_walls[0].dex_sources == pytest.approx({"uniswap_v2": 50.0, "uniswap_v3": 50.0})


def test_non_usdc_quote_without_distribution_is_not_found():
    store = FakeStore(tokens=[BASE, OTHER])

    with pytest.raises(DistributionNotFoundError):
        _use_case(store).execute(GetLiquidityWallsInput(token0=BASE.address, token1=OTHER.address))


def test_missing_token_is_not_found():
    store = FakeStore(tokens=[USDC])

    with pytest.raises(TokenNotFoundError):
        _use_case(store).execute(GetLiquidityWallsInput(token0=BASE.address, token1=USDC.address))


@pytest.mark.parametrize("token0", ["not-an-address", "0x1234", BASE.address[2:]])
def test_malformed_address_is_rejected(token0):
    with pytest.raises(InvalidAddressError):
        _use_case(FakeStore(tokens=[BASE, USDC])).execute(GetLiquidityWallsInput(token0=token0, token1=USDC.address))


def test_unknown_dex_is_rejected():
    with pytest.raises(UnknownDexError):
        _use_case(FakeStore(tokens=[BASE, USDC])).execute(
            GetLiquidityWallsInput(token0=BASE.address, token1=USDC.address, dex="curve")
        )


def test_usdc_quote_on_polygon_goes_through_aggregator():
    base = Token(address=BASE.address, chain_id=137, symbol="TKN", name="Token", decimals=18)
    usdc = POLYGON_ROUTING_TOKENS.usdc
    aggregator = FakeAggregator(_distribution(base, usdc, 10.0, dex="aggregated"))
    store = FakeStore(tokens=[base, usdc])

    result = _use_case(store, aggregator).execute(
        GetLiquidityWallsInput(token0=base.address, token1=usdc.address, chain_id=137)
    )

    assert aggregator.commands[0].chain_id == 137
    assert result.token1 == usdc
    assert len(result.buy_walls) == 1


@pytest.mark.parametrize("chain_id", [1, 10, 137, 42161])
def test_every_configured_chain_has_routing_tokens(chain_id):
    routing = DEFAULT_ROUTING_TOKENS[chain_id]

    assert routing.usdc.chain_id == chain_id
    assert routing.usdc.decimals == 6
    assert [token.symbol for token in routing.quotes] == ["WETH", "USDT", "DAI", "WBTC"]
    assert all(token.chain_id == chain_id for token in routing.quotes)
    assert routing.stables == {routing.quotes[1].address, routing.quotes[2].address}
