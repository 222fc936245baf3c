from __future__ import annotations

import asyncio
import logging

from liquidity_walls.application.dto.indexing import IndexCycleReport
from liquidity_walls.application.ports.dex_adapter_port import DexAdapterPort
from liquidity_walls.application.ports.distribution_store_port import DistributionStorePort
from liquidity_walls.domain.entities.liquidity_distribution import LiquidityDistribution
from liquidity_walls.domain.entities.pool import Pool
from liquidity_walls.domain.exceptions import DomainError, UnknownDexError
from liquidity_walls.domain.services.addresses import normalize_address


logger = logging.getLogger(__name__)


class IndexLiquidityUseCase:
    """Periodically snapshot every adapter's pools into the store.

    Adapters and pools are processed in order unless max_concurrency > 1, in
    which case pools of one adapter are fetched concurrently under a semaphore.
    A failing pool is logged and skipped; a failing enumeration abandons that
    adapter for the current cycle.
    """

    def __init__(
        self,
        *,
        adapters: list[DexAdapterPort],
        store: DistributionStorePort,
        batch_size: int,
        interval_seconds: float,
        max_concurrency: int = 1,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1.")
        self._adapters = adapters
        self._store = store
        self._batch_size = batch_size
        self._interval_seconds = interval_seconds
        self._max_concurrency = max(1, max_concurrency)

    async def run_forever(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            report = await self.run_cycle()
            logger.info(
                "indexer: cycle done indexed=%s failed=%s adapters_failed=%s",
                report.pools_indexed,
                report.pools_failed,
                ",".join(report.adapters_failed) or "-",
            )
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._interval_seconds)
            except asyncio.TimeoutError:
                continue
        logger.info("indexer: stopped")

    async def run_cycle(self) -> IndexCycleReport:
        report = IndexCycleReport()
        for adapter in self._adapters:
            try:
                pools = await adapter.list_pools(limit=self._batch_size)
            except DomainError as exc:
                logger.warning(
                    "indexer: abandoning adapter cycle dex=%s chain_id=%s error=%s",
                    adapter.name,
                    adapter.chain_id,
                    exc,
                )
                report.adapters_failed.append(adapter.name)
                continue

            logger.info("indexer: indexing pools dex=%s count=%s", adapter.name, len(pools))
            if self._max_concurrency == 1:
                results = [await self._index_one(adapter, pool) for pool in pools]
            else:
                semaphore = asyncio.Semaphore(self._max_concurrency)

                async def bounded(pool: Pool) -> bool:
                    async with semaphore:
                        return await self._index_one(adapter, pool)

                results = await asyncio.gather(*(bounded(pool) for pool in pools))

            report.pools_indexed += sum(1 for ok in results if ok)
            report.pools_failed += sum(1 for ok in results if not ok)
        return report

    async def index_pool(self, *, dex: str, address: str) -> LiquidityDistribution:
        adapter = self._adapter_by_name(dex)
        pool = await adapter.fetch_pool(normalize_address(address, field_name="pair"))
        distribution = await adapter.distribution(pool)
        await self._persist(pool, distribution)
        logger.info(
            "indexer: indexed pool dex=%s pool=%s levels=%s price=%s",
            dex,
            pool.address,
            len(distribution.price_levels),
            distribution.current_price,
        )
        return distribution

    async def _index_one(self, adapter: DexAdapterPort, pool: Pool) -> bool:
        try:
            distribution = await adapter.distribution(pool)
            await self._persist(pool, distribution)
        except DomainError as exc:
            logger.warning(
                "indexer: pool failed dex=%s pool=%s error=%s",
                adapter.name,
                pool.address,
                exc,
            )
            return False
        logger.debug(
            "indexer: pool stored dex=%s pool=%s levels=%s",
            adapter.name,
            pool.address,
            len(distribution.price_levels),
        )
        return True

    async def _persist(self, pool: Pool, distribution: LiquidityDistribution) -> None:
        await asyncio.to_thread(self._store.upsert_pool, pool)
        await asyncio.to_thread(self._store.upsert, distribution)

    def _adapter_by_name(self, dex: str) -> DexAdapterPort:
        for adapter in self._adapters:
            if adapter.name == dex:
                return adapter
        raise UnknownDexError(f"Unknown dex: {dex}")
