from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from liquidity_walls.domain.entities.liquidity_distribution import (
    LiquidityDistribution,
    PriceLevel,
    Side,
)
from liquidity_walls.domain.entities.pool import Pool
from liquidity_walls.domain.entities.token import Token
from liquidity_walls.domain.exceptions import SerializationError


def map_row_to_token(row: Mapping[str, Any], *, prefix: str = "") -> Token:
    return Token(
        address=row[f"{prefix}address"],
        chain_id=int(row[f"{prefix}chain_id"]),
        symbol=row[f"{prefix}symbol"],
        name=row[f"{prefix}name"],
        decimals=int(row[f"{prefix}decimals"]),
    )


def map_row_to_pool(row: Mapping[str, Any]) -> Pool:
    return Pool(
        address=row["address"],
        chain_id=int(row["chain_id"]),
        dex=row["dex"],
        token0=map_row_to_token(row, prefix="token0_"),
        token1=map_row_to_token(row, prefix="token1_"),
        fee=int(row["fee"]),
        creation_block=int(row["creation_block"]),
        creation_timestamp=int(row["creation_timestamp"]),
        last_updated_block=int(row["last_updated_block"]),
        last_updated_timestamp=int(row["last_updated_timestamp"]),
        tick_spacing=row["tick_spacing"],
    )


def token_to_dict(token: Token) -> dict[str, Any]:
    return {
        "address": token.address,
        "chain_id": token.chain_id,
        "symbol": token.symbol,
        "name": token.name,
        "decimals": token.decimals,
    }


def _level_to_dict(level: PriceLevel) -> dict[str, Any]:
    return {
        "lower_price": level.lower_price,
        "upper_price": level.upper_price,
        "token0_liquidity": level.token0_liquidity,
        "token1_liquidity": level.token1_liquidity,
        "side": level.side.value,
        "timestamp": level.timestamp.isoformat(),
        "source": level.source,
    }


def _dict_to_level(item: Mapping[str, Any]) -> PriceLevel:
    return PriceLevel(
        lower_price=float(item["lower_price"]),
        upper_price=float(item["upper_price"]),
        token0_liquidity=float(item["token0_liquidity"]),
        token1_liquidity=float(item["token1_liquidity"]),
        side=Side(item["side"]),
        timestamp=datetime.fromisoformat(item["timestamp"]),
        source=item.get("source"),
    )


def serialize_distribution(distribution: LiquidityDistribution) -> str:
    payload = {
        "token0": token_to_dict(distribution.token0),
        "token1": token_to_dict(distribution.token1),
        "current_price": distribution.current_price,
        "dex": distribution.dex,
        "chain_id": distribution.chain_id,
        "timestamp": distribution.timestamp.isoformat(),
        "price_levels": [_level_to_dict(level) for level in distribution.price_levels],
    }
    try:
        return json.dumps(payload)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Cannot serialize distribution: {exc}") from exc


def deserialize_distribution(data: str) -> LiquidityDistribution:
    try:
        payload = json.loads(data)
        return LiquidityDistribution(
            token0=Token(**payload["token0"]),
            token1=Token(**payload["token1"]),
            current_price=float(payload["current_price"]),
            dex=payload["dex"],
            chain_id=int(payload["chain_id"]),
            price_levels=[_dict_to_level(item) for item in payload["price_levels"]],
            timestamp=datetime.fromisoformat(payload["timestamp"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise SerializationError(f"Cannot deserialize distribution: {exc}") from exc
