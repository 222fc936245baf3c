from __future__ import annotations

from liquidity_walls.application.dto.catalog import GetTokenInput
from liquidity_walls.application.ports.distribution_store_port import DistributionStorePort
from liquidity_walls.domain.entities.token import Token
from liquidity_walls.domain.exceptions import TokenNotFoundError
from liquidity_walls.domain.services.addresses import normalize_address


class GetTokenUseCase:
    def __init__(self, *, store: DistributionStorePort):
        self._store = store

    def execute(self, command: GetTokenInput) -> Token:
        address = normalize_address(command.address)
        token = self._store.get_token(address=address, chain_id=command.chain_id)
        if token is None:
            raise TokenNotFoundError(f"Token not found: {address}")
        return token
