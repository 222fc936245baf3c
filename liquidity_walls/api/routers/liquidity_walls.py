from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from liquidity_walls.api.deps import get_liquidity_walls_use_case
from liquidity_walls.api.errors import to_http_exception
from liquidity_walls.api.schemas.liquidity_walls import (
    LiquidityWallResponse,
    LiquidityWallsResponse,
    TokenResponse,
)
from liquidity_walls.application.dto.liquidity_walls import GetLiquidityWallsInput
from liquidity_walls.application.use_cases.get_liquidity_walls import GetLiquidityWallsUseCase
from liquidity_walls.domain.entities.liquidity_distribution import LiquidityWall
from liquidity_walls.domain.entities.token import Token
from liquidity_walls.domain.exceptions import DomainError

router = APIRouter()


def _token_response(token: Token) -> TokenResponse:
    return TokenResponse(
        address=token.address,
        symbol=token.symbol,
        name=token.name,
        decimals=token.decimals,
        chain_id=token.chain_id,
    )


def _wall_response(wall: LiquidityWall) -> LiquidityWallResponse:
    return LiquidityWallResponse(
        price_lower=wall.price_lower,
        price_upper=wall.price_upper,
        liquidity_value=wall.liquidity_value,
        dex_sources=wall.dex_sources,
        strength=wall.strength,
    )


@router.get("/v1/liquidity/walls/{token0}/{token1}", response_model=LiquidityWallsResponse)
def get_liquidity_walls(
    token0: str,
    token1: str,
    dex: str | None = Query(None, description="Restrict the aggregation to one DEX."),
    chain_id: int = Query(1, description="EVM chain id."),
    use_case: GetLiquidityWallsUseCase = Depends(get_liquidity_walls_use_case),
):
    try:
        result = use_case.execute(
            GetLiquidityWallsInput(
                token0=token0,
                token1=token1,
                chain_id=chain_id,
                dex=dex,
            )
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc

    return LiquidityWallsResponse(
        token0=_token_response(result.token0),
        token1=_token_response(result.token1),
        price=result.price,
        buy_walls=[_wall_response(wall) for wall in result.buy_walls],
        sell_walls=[_wall_response(wall) for wall in result.sell_walls],
        timestamp=result.timestamp,
    )
