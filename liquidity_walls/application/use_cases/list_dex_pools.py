from __future__ import annotations

import logging

from liquidity_walls.application.dto.catalog import ListDexPoolsInput
from liquidity_walls.application.ports.distribution_store_port import DistributionStorePort
from liquidity_walls.domain.exceptions import DatabaseError, InvalidRequestError, UnknownDexError


logger = logging.getLogger(__name__)


class ListDexPoolsUseCase:
    def __init__(self, *, store: DistributionStorePort, dex_names: tuple[str, ...]):
        self._store = store
        self._dex_names = dex_names

    def execute(self, command: ListDexPoolsInput) -> list[str]:
        if command.dex not in self._dex_names:
            raise UnknownDexError(f"Unknown dex: {command.dex}")
        if command.limit < 1 or command.offset < 0:
            raise InvalidRequestError("limit must be >= 1 and offset must be >= 0.")
        try:
            return self._store.list_pools(
                dex=command.dex,
                chain_id=command.chain_id,
                limit=command.limit,
                offset=command.offset,
            )
        except DatabaseError as exc:
            # Listing degrades to empty instead of failing the request.
            logger.warning("list_dex_pools: store read failed dex=%s error=%s", command.dex, exc)
            return []
