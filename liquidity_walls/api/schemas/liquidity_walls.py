from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    address: str
    symbol: str
    name: str
    decimals: int
    chain_id: int


class LiquidityWallResponse(BaseModel):
    price_lower: float = Field(..., description="Lower bound of the wall (token1 per token0).")
    price_upper: float = Field(..., description="Upper bound of the wall (token1 per token0).")
    liquidity_value: float = Field(..., description="Liquidity inside the wall, quoted in token1.")
    dex_sources: dict[str, float] = Field(default_factory=dict, description="Contribution per DEX.")
    strength: float = Field(0.0, description="Share of the binned liquidity held by this wall.")


class LiquidityWallsResponse(BaseModel):
    token0: TokenResponse
    token1: TokenResponse
    price: float
    buy_walls: list[LiquidityWallResponse]
    sell_walls: list[LiquidityWallResponse]
    timestamp: datetime
