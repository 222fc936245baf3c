from __future__ import annotations

from typing import Protocol

from liquidity_walls.domain.entities.pool_state import ConstantProductState, PopulatedTick


class TokenMetadataReaderPort(Protocol):
    async def token_metadata(self, address: str) -> tuple[str, str, int]:
        """Return (symbol, name, decimals); raises RpcError when the calls fail."""
        ...


class ConstantProductReaderPort(Protocol):
    async def pair_count(self, factory: str) -> int:
        ...

    async def pair_at(self, factory: str, index: int) -> str:
        ...

    async def pair_tokens(self, pair: str) -> tuple[str, str]:
        ...

    async def reserves(self, pair: str) -> ConstantProductState:
        ...

    async def block_number(self) -> int:
        ...


class ConcentratedLiquidityReaderPort(Protocol):
    async def created_pools(
        self,
        factory: str,
        *,
        from_block: int,
        limit: int,
        chunk_size: int,
    ) -> list[str]:
        ...

    async def pool_immutables(self, pool: str) -> tuple[str, str, int, int]:
        """Return (token0, token1, fee, tick_spacing)."""
        ...

    async def slot0(self, pool: str) -> tuple[int, int]:
        """Return (sqrt_price_x96, tick)."""
        ...

    async def active_liquidity(self, pool: str) -> int:
        ...

    async def tick_bitmap(self, pool: str, word: int) -> int:
        ...

    async def populated_ticks_in_word(self, pool: str, word: int) -> list[PopulatedTick]:
        ...

    async def block_number(self) -> int:
        ...
