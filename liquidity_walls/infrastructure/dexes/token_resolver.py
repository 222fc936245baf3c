from __future__ import annotations

import asyncio
import logging

from liquidity_walls.application.ports.chain_reader_port import TokenMetadataReaderPort
from liquidity_walls.application.ports.distribution_store_port import DistributionStorePort
from liquidity_walls.domain.entities.token import Token, fallback_token
from liquidity_walls.domain.exceptions import RpcError


logger = logging.getLogger(__name__)


class TokenResolver:
    """Token metadata lookup: memory, then store, then ERC-20 calls, then fallback."""

    def __init__(
        self,
        *,
        chain_id: int,
        reader: TokenMetadataReaderPort,
        store: DistributionStorePort | None = None,
    ):
        self._chain_id = chain_id
        self._reader = reader
        self._store = store
        self._cache: dict[str, Token] = {}

    async def resolve(self, address: str) -> Token:
        address = address.lower()
        cached = self._cache.get(address)
        if cached is not None:
            return cached

        token = None
        if self._store is not None:
            token = await asyncio.to_thread(self._store.get_token, address=address, chain_id=self._chain_id)
        if token is None:
            token = await self._fetch(address)
        self._cache[address] = token
        return token

    async def _fetch(self, address: str) -> Token:
        try:
            symbol, name, decimals = await self._reader.token_metadata(address)
            return Token(
                address=address,
                chain_id=self._chain_id,
                symbol=symbol,
                name=name,
                decimals=decimals,
            )
        except (RpcError, ValueError) as exc:
            logger.warning(
                "token_resolver: metadata unavailable, using fallback token=%s chain_id=%s error=%s",
                address,
                self._chain_id,
                exc,
            )
            return fallback_token(address=address, chain_id=self._chain_id)
