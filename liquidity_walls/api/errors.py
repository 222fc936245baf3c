from __future__ import annotations

from fastapi import HTTPException

from liquidity_walls.domain.exceptions import (
    DistributionNotFoundError,
    DomainError,
    InvalidAddressError,
    InvalidRequestError,
    PoolNotFoundError,
    TokenNotFoundError,
    UnknownDexError,
)


_NOT_FOUND = (TokenNotFoundError, PoolNotFoundError, DistributionNotFoundError)
_BAD_REQUEST = (InvalidAddressError, UnknownDexError, InvalidRequestError)


def to_http_exception(exc: DomainError) -> HTTPException:
    if isinstance(exc, _NOT_FOUND):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, _BAD_REQUEST):
        return HTTPException(status_code=400, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))
