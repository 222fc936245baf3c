from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

from liquidity_walls.application.ports.chain_reader_port import ConstantProductReaderPort
from liquidity_walls.domain.entities.liquidity_distribution import LiquidityDistribution
from liquidity_walls.domain.entities.pool import Pool
from liquidity_walls.domain.exceptions import DexError, DomainError
from liquidity_walls.domain.services.constant_product import build_constant_product_levels
from liquidity_walls.infrastructure.dexes.token_resolver import TokenResolver


logger = logging.getLogger(__name__)

DEFAULT_V2_FEE = 3000


class UniswapV2Adapter:
    def __init__(
        self,
        *,
        name: str,
        chain_id: int,
        factory: str,
        reader: ConstantProductReaderPort,
        tokens: TokenResolver,
        fee: int = DEFAULT_V2_FEE,
        pools: tuple[str, ...] = (),
    ):
        self.name = name
        self.chain_id = chain_id
        self.factory = factory.lower()
        self._reader = reader
        self._tokens = tokens
        self._fee = fee
        self._pools = tuple(address.lower() for address in pools)

    async def list_pools(self, *, limit: int) -> list[Pool]:
        if self._pools:
            addresses = list(self._pools[:limit])
        else:
            total = await self._reader.pair_count(self.factory)
            addresses = [await self._reader.pair_at(self.factory, index) for index in range(min(total, limit))]

        pools: list[Pool] = []
        for address in addresses:
            try:
                pools.append(await self.fetch_pool(address))
            except DomainError as exc:
                logger.warning("uniswap_v2: skipping pool dex=%s pool=%s error=%s", self.name, address, exc)
        return pools

    async def fetch_pool(self, address: str) -> Pool:
        address = address.lower()
        token0_address, token1_address = await self._reader.pair_tokens(address)
        if token0_address >= token1_address:
            raise DexError(f"Pair {address} reports unordered tokens.")
        token0 = await self._tokens.resolve(token0_address)
        token1 = await self._tokens.resolve(token1_address)
        block = await self._reader.block_number()
        return Pool(
            address=address,
            chain_id=self.chain_id,
            dex=self.name,
            token0=token0,
            token1=token1,
            fee=self._fee,
            last_updated_block=block,
            last_updated_timestamp=int(time.time()),
        )

    async def distribution(self, pool: Pool) -> LiquidityDistribution:
        state = await self._reader.reserves(pool.address)
        timestamp = datetime.now(timezone.utc)
        current_price, levels = build_constant_product_levels(
            state=state,
            token0_decimals=pool.token0.decimals,
            token1_decimals=pool.token1.decimals,
            timestamp=timestamp,
        )
        return LiquidityDistribution(
            token0=pool.token0,
            token1=pool.token1,
            current_price=current_price,
            dex=self.name,
            chain_id=self.chain_id,
            price_levels=levels,
            timestamp=timestamp,
        )
