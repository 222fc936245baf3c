from __future__ import annotations

from typing import Protocol

from liquidity_walls.domain.entities.liquidity_distribution import LiquidityDistribution
from liquidity_walls.domain.entities.pool import Pool
from liquidity_walls.domain.entities.token import Token


class DistributionStorePort(Protocol):
    def upsert_token(self, token: Token) -> None:
        ...

    def upsert_pool(self, pool: Pool) -> None:
        ...

    def upsert(self, distribution: LiquidityDistribution) -> None:
        ...

    def get(
        self,
        *,
        token0: str,
        token1: str,
        dex: str,
        chain_id: int,
    ) -> LiquidityDistribution | None:
        ...

    def list_pools(self, *, dex: str, chain_id: int, limit: int, offset: int = 0) -> list[str]:
        ...

    def get_pool(self, *, address: str, chain_id: int | None = None) -> Pool | None:
        ...

    def get_token(self, *, address: str, chain_id: int) -> Token | None:
        ...
