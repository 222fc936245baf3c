from __future__ import annotations

from functools import lru_cache

from fastapi import HTTPException

from liquidity_walls.application.use_cases.aggregate_liquidity import AggregateLiquidityUseCase
from liquidity_walls.application.use_cases.get_liquidity_walls import GetLiquidityWallsUseCase
from liquidity_walls.application.use_cases.get_token import GetTokenUseCase
from liquidity_walls.application.use_cases.list_dex_pools import ListDexPoolsUseCase
from liquidity_walls.domain.entities.routing import DEFAULT_ROUTING_TOKENS
from liquidity_walls.domain.exceptions import DomainError
from liquidity_walls.infrastructure.db.engine import get_engine
from liquidity_walls.infrastructure.db.repositories.distribution_store_repository import (
    SqlDistributionStore,
)
from liquidity_walls.shared.config import get_settings


@lru_cache(maxsize=1)
def _get_store() -> SqlDistributionStore:
    settings = get_settings()
    if not settings.database.url:
        raise HTTPException(status_code=500, detail="database.url is required.")
    try:
        return SqlDistributionStore(get_engine(settings.database.url))
    except DomainError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


def get_liquidity_walls_use_case() -> GetLiquidityWallsUseCase:
    settings = get_settings()
    store = _get_store()
    aggregator = AggregateLiquidityUseCase(
        store=store,
        routing_tokens=DEFAULT_ROUTING_TOKENS,
        dex_names=settings.dex_names,
        reference_dexes=settings.aggregator.reference_dexes,
        mode=settings.aggregator.mode,
        bucket_count=settings.aggregator.bucket_count,
    )
    return GetLiquidityWallsUseCase(
        store=store,
        aggregator=aggregator,
        routing_tokens=DEFAULT_ROUTING_TOKENS,
        dex_names=settings.dex_names,
        wall_count=settings.aggregator.wall_count,
    )


def get_token_use_case() -> GetTokenUseCase:
    return GetTokenUseCase(store=_get_store())


def get_list_dex_pools_use_case() -> ListDexPoolsUseCase:
    return ListDexPoolsUseCase(store=_get_store(), dex_names=get_settings().dex_names)
