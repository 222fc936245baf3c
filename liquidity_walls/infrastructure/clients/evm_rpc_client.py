from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import Web3Exception

from liquidity_walls.domain.exceptions import ProviderError, RpcError


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class EvmRpcClientSettings:
    url: str
    chain_id: int
    timeout_seconds: float = 30.0
    max_retries: int = 3
    retry_delay_seconds: float = 0.25


class EvmRpcClient:
    def __init__(self, settings: EvmRpcClientSettings, web3: AsyncWeb3 | None = None):
        self._settings = settings
        if web3 is None:
            if not settings.url:
                raise ProviderError(f"Missing RPC url for chain_id={settings.chain_id}")
            web3 = AsyncWeb3(AsyncHTTPProvider(settings.url))
        self._web3 = web3

    @property
    def web3(self) -> AsyncWeb3:
        return self._web3

    @property
    def chain_id(self) -> int:
        return self._settings.chain_id

    def contract(self, address: str, abi: list[dict]):
        return self._web3.eth.contract(address=AsyncWeb3.to_checksum_address(address), abi=abi)

    async def call(self, make_call: Callable[[], Awaitable[T]], *, what: str) -> T:
        attempts = max(1, self._settings.max_retries)
        delay = self._settings.retry_delay_seconds
        last_exc: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                return await asyncio.wait_for(make_call(), timeout=self._settings.timeout_seconds)
            except (Web3Exception, asyncio.TimeoutError, OSError, ValueError) as exc:
                last_exc = exc
                if attempt == attempts:
                    break
                logger.warning(
                    "evm_rpc_client: retry chain_id=%s call=%s attempt=%s/%s error=%s",
                    self._settings.chain_id,
                    what,
                    attempt,
                    attempts,
                    exc,
                )
                await asyncio.sleep(delay)
                delay *= 2

        raise RpcError(f"RPC call {what} failed on chain_id={self._settings.chain_id}: {last_exc}") from last_exc

    async def block_number(self) -> int:
        return await self.call(lambda: self._web3.eth.get_block_number(), what="eth_blockNumber")

    async def get_logs(self, filter_params: dict) -> list:
        return await self.call(lambda: self._web3.eth.get_logs(filter_params), what="eth_getLogs")
