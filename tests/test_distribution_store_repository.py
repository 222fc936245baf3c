from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from liquidity_walls.domain.entities.liquidity_distribution import LiquidityDistribution, PriceLevel, Side
from liquidity_walls.domain.entities.pool import Pool
from liquidity_walls.domain.entities.token import Token
from liquidity_walls.domain.exceptions import SerializationError
from liquidity_walls.infrastructure.db.mappers.liquidity_mapper import deserialize_distribution
from liquidity_walls.infrastructure.db.repositories.distribution_store_repository import (
    SqlDistributionStore,
)


NOW = datetime(2026, 1, 1, 12, 30, tzinfo=timezone.utc)
USDC = Token(
    address="0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",
    chain_id=1,
    symbol="USDC",
    name="USD Coin",
    decimals=6,
)
TOKEN = Token(address="0x" + "11" * 20, chain_id=1, symbol="TKN", name="Token", decimals=18)


@pytest.fixture
def store() -> SqlDistributionStore:
    engine = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    return SqlDistributionStore(engine)


def _distribution(current_price: float = 2000.123456789, dex: str = "uniswap_v3") -> LiquidityDistribution:
    return LiquidityDistribution(
        token0=TOKEN,
        token1=USDC,
        current_price=current_price,
        dex=dex,
        chain_id=1,
        price_levels=[
            PriceLevel(
                lower_price=1999.1 / 3,
                upper_price=2000.123456789,
                token0_liquidity=0.0,
                token1_liquidity=123456.789e-3,
                side=Side.BUY,
                timestamp=NOW,
            ),
            PriceLevel(
                lower_price=2000.123456789,
                upper_price=2100.0000001,
                token0_liquidity=0.1 + 0.2,
                token1_liquidity=0.0,
                side=Side.SELL,
                timestamp=NOW,
                source="uniswap_v3",
            ),
        ],
        timestamp=NOW,
    )


def _pool(address: str, dex: str = "uniswap_v2") -> Pool:
    return Pool(
        address=address,
        chain_id=1,
        dex=dex,
        token0=TOKEN,
        token1=USDC,
        fee=3000,
        last_updated_block=19_000_000,
        last_updated_timestamp=1_700_000_000,
    )


def test_distribution_round_trip_is_exact(store):
    distribution = _distribution()

    store.upsert(distribution)
    loaded = store.get(token0=TOKEN.address, token1=USDC.address, dex="uniswap_v3", chain_id=1)

    assert loaded == distribution


def test_get_returns_none_for_missing_and_never_swaps_order(store):
    store.upsert(_distribution())

    assert store.get(token0=USDC.address, token1=TOKEN.address, dex="uniswap_v3", chain_id=1) is None
    assert store.get(token0=TOKEN.address, token1=USDC.address, dex="uniswap_v2", chain_id=1) is None


def test_upsert_replaces_previous_distribution(store):
    store.upsert(_distribution(current_price=1.0))
    store.upsert(_distribution(current_price=2.0))

    loaded = store.get(token0=TOKEN.address, token1=USDC.address, dex="uniswap_v3", chain_id=1)

    assert loaded.current_price == 2.0


def test_distribution_write_stores_token_rows(store):
    store.upsert(_distribution())

    assert store.get_token(address=TOKEN.address, chain_id=1) == TOKEN
    assert store.get_token(address=USDC.address, chain_id=1) == USDC
    assert store.get_token(address=TOKEN.address, chain_id=137) is None


def test_pool_round_trip_includes_tokens(store):
    pool = _pool("0x" + "33" * 20)

    store.upsert_pool(pool)

    assert store.get_pool(address=pool.address) == pool
    assert store.get_pool(address=pool.address, chain_id=1) == pool
    assert store.get_pool(address=pool.address, chain_id=10) is None


def test_list_pools_paginates_in_insertion_order(store):
    addresses = ["0x" + digit * 40 for digit in ("9", "3", "7", "5")]
    for address in addresses:
        store.upsert_pool(_pool(address))
    store.upsert_pool(replace(_pool(addresses[0]), last_updated_block=19_000_001))
    store.upsert_pool(_pool("0x" + "4" * 40, dex="sushiswap"))

    assert store.list_pools(dex="uniswap_v2", chain_id=1, limit=10) == addresses
    assert store.list_pools(dex="uniswap_v2", chain_id=1, limit=2, offset=1) == addresses[1:3]
    assert store.list_pools(dex="sushiswap", chain_id=1, limit=10) == ["0x" + "4" * 40]


def test_upsert_token_keeps_first_observation(store):
    store.upsert_token(TOKEN)
    store.upsert_token(replace(TOKEN, symbol="OTHER"))

    assert store.get_token(address=TOKEN.address, chain_id=1).symbol == "TKN"


def test_corrupted_payload_raises_serialization_error():
    with pytest.raises(SerializationError):
        deserialize_distribution('{"token0": {}}')
