from __future__ import annotations

from typing import Protocol

from liquidity_walls.domain.entities.liquidity_distribution import LiquidityDistribution
from liquidity_walls.domain.entities.pool import Pool


class DexAdapterPort(Protocol):
    name: str
    chain_id: int
    factory: str

    async def list_pools(self, *, limit: int) -> list[Pool]:
        ...

    async def fetch_pool(self, address: str) -> Pool:
        ...

    async def distribution(self, pool: Pool) -> LiquidityDistribution:
        ...
