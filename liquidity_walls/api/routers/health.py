from __future__ import annotations

from fastapi import APIRouter

from liquidity_walls.api.schemas.common import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def root():
    return HealthResponse(status="ok")


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok")
