from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from liquidity_walls.api.deps import get_list_dex_pools_use_case, get_token_use_case
from liquidity_walls.api.errors import to_http_exception
from liquidity_walls.api.schemas.liquidity_walls import TokenResponse
from liquidity_walls.application.dto.catalog import GetTokenInput, ListDexPoolsInput
from liquidity_walls.application.use_cases.get_token import GetTokenUseCase
from liquidity_walls.application.use_cases.list_dex_pools import ListDexPoolsUseCase
from liquidity_walls.domain.exceptions import DomainError

router = APIRouter()


@router.get("/v1/tokens/{chain_id}/{address}", response_model=TokenResponse)
def get_token(
    chain_id: int,
    address: str,
    use_case: GetTokenUseCase = Depends(get_token_use_case),
):
    try:
        token = use_case.execute(GetTokenInput(address=address, chain_id=chain_id))
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return TokenResponse(
        address=token.address,
        symbol=token.symbol,
        name=token.name,
        decimals=token.decimals,
        chain_id=token.chain_id,
    )


@router.get("/v1/pools/{dex}/{chain_id}", response_model=list[str])
def list_dex_pools(
    dex: str,
    chain_id: int,
    limit: int = Query(100, ge=1, le=10000),
    offset: int = Query(0, ge=0),
    use_case: ListDexPoolsUseCase = Depends(get_list_dex_pools_use_case),
):
    try:
        return use_case.execute(
            ListDexPoolsInput(dex=dex, chain_id=chain_id, limit=limit, offset=offset)
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
