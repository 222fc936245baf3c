from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

from liquidity_walls.application.ports.chain_reader_port import ConcentratedLiquidityReaderPort
from liquidity_walls.domain.entities.liquidity_distribution import LiquidityDistribution
from liquidity_walls.domain.entities.pool import Pool
from liquidity_walls.domain.entities.pool_state import ConcentratedLiquidityState, PopulatedTick
from liquidity_walls.domain.exceptions import DexError, DomainError, IncompleteTickDataError, RpcError
from liquidity_walls.domain.services.concentrated_liquidity import build_concentrated_liquidity_levels
from liquidity_walls.domain.services.univ3_math import tick_to_word, word_bounds
from liquidity_walls.infrastructure.dexes.token_resolver import TokenResolver


logger = logging.getLogger(__name__)

UNISWAP_V3_START_BLOCK = 12369621
DEFAULT_LOG_CHUNK_SIZE = 10_000
DEFAULT_TICK_WORD_RADIUS = 32


class UniswapV3Adapter:
    def __init__(
        self,
        *,
        name: str,
        chain_id: int,
        factory: str,
        reader: ConcentratedLiquidityReaderPort,
        tokens: TokenResolver,
        pools: tuple[str, ...] = (),
        start_block: int = UNISWAP_V3_START_BLOCK,
        log_chunk_size: int = DEFAULT_LOG_CHUNK_SIZE,
        tick_word_radius: int | None = DEFAULT_TICK_WORD_RADIUS,
    ):
        self.name = name
        self.chain_id = chain_id
        self.factory = factory.lower()
        self._reader = reader
        self._tokens = tokens
        self._pools = tuple(address.lower() for address in pools)
        self._start_block = start_block
        self._log_chunk_size = log_chunk_size
        self._tick_word_radius = tick_word_radius

    async def list_pools(self, *, limit: int) -> list[Pool]:
        if self._pools:
            addresses = list(self._pools[:limit])
        else:
            addresses = await self._reader.created_pools(
                self.factory,
                from_block=self._start_block,
                limit=limit,
                chunk_size=self._log_chunk_size,
            )

        pools: list[Pool] = []
        for address in addresses:
            try:
                pools.append(await self.fetch_pool(address))
            except DomainError as exc:
                logger.warning("uniswap_v3: skipping pool dex=%s pool=%s error=%s", self.name, address, exc)
        return pools

    async def fetch_pool(self, address: str) -> Pool:
        address = address.lower()
        token0_address, token1_address, fee, tick_spacing = await self._reader.pool_immutables(address)
        if token0_address >= token1_address:
            raise DexError(f"Pool {address} reports unordered tokens.")
        if tick_spacing <= 0:
            raise DexError(f"Pool {address} reports invalid tick spacing {tick_spacing}.")
        token0 = await self._tokens.resolve(token0_address)
        token1 = await self._tokens.resolve(token1_address)
        block = await self._reader.block_number()
        return Pool(
            address=address,
            chain_id=self.chain_id,
            dex=self.name,
            token0=token0,
            token1=token1,
            fee=fee,
            last_updated_block=block,
            last_updated_timestamp=int(time.time()),
            tick_spacing=tick_spacing,
        )

    async def distribution(self, pool: Pool) -> LiquidityDistribution:
        tick_spacing = pool.tick_spacing
        if tick_spacing is None:
            _, _, _, tick_spacing = await self._reader.pool_immutables(pool.address)

        sqrt_price_x96, current_tick = await self._reader.slot0(pool.address)
        liquidity = await self._reader.active_liquidity(pool.address)
        ticks = await self._populated_ticks(pool.address, current_tick=current_tick, tick_spacing=tick_spacing)

        timestamp = datetime.now(timezone.utc)
        current_price, levels = build_concentrated_liquidity_levels(
            state=ConcentratedLiquidityState(
                sqrt_price_x96=sqrt_price_x96,
                tick=current_tick,
                tick_spacing=tick_spacing,
                liquidity=liquidity,
                ticks=ticks,
            ),
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

    async def _populated_ticks(self, pool: str, *, current_tick: int, tick_spacing: int) -> list[PopulatedTick]:
        first_word, last_word = word_bounds(tick_spacing)
        if self._tick_word_radius is not None:
            current_word = tick_to_word(current_tick, tick_spacing)
            first_word = max(first_word, current_word - self._tick_word_radius)
            last_word = min(last_word, current_word + self._tick_word_radius)

        ticks: list[PopulatedTick] = []
        for word in range(first_word, last_word + 1):
            try:
                bitmap = await self._reader.tick_bitmap(pool, word)
                if bitmap == 0:
                    continue
                ticks.extend(await self._reader.populated_ticks_in_word(pool, word))
            except RpcError as exc:
                raise IncompleteTickDataError(f"Tick word {word} unavailable for pool {pool}: {exc}") from exc
        ticks.sort(key=lambda item: item.tick)
        return ticks
