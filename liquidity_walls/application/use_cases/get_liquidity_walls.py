from __future__ import annotations

import logging

from liquidity_walls.application.dto.liquidity_walls import (
    AggregateLiquidityInput,
    GetLiquidityWallsInput,
)
from liquidity_walls.application.ports.distribution_store_port import DistributionStorePort
from liquidity_walls.application.use_cases.aggregate_liquidity import AggregateLiquidityUseCase
from liquidity_walls.application.use_cases.pair_distribution_loader import load_pair_distribution
from liquidity_walls.domain.entities.liquidity_distribution import (
    LiquidityDistribution,
    LiquidityWalls,
)
from liquidity_walls.domain.entities.routing import RoutingTokens
from liquidity_walls.domain.entities.token import Token
from liquidity_walls.domain.exceptions import (
    DistributionNotFoundError,
    InvalidAddressError,
    TokenNotFoundError,
    UnknownDexError,
)
from liquidity_walls.domain.services.addresses import normalize_address
from liquidity_walls.domain.services.aggregation import DEFAULT_BUCKET_COUNT, merge_distributions
from liquidity_walls.domain.services.walls import extract_walls


logger = logging.getLogger(__name__)


class GetLiquidityWallsUseCase:
    def __init__(
        self,
        *,
        store: DistributionStorePort,
        aggregator: AggregateLiquidityUseCase,
        routing_tokens: dict[int, RoutingTokens],
        dex_names: tuple[str, ...],
        wall_count: int = DEFAULT_BUCKET_COUNT,
    ):
        self._store = store
        self._aggregator = aggregator
        self._routing_tokens = routing_tokens
        self._dex_names = dex_names
        self._wall_count = wall_count

    def execute(self, command: GetLiquidityWallsInput) -> LiquidityWalls:
        token0_address = normalize_address(command.token0, field_name="token0")
        token1_address = normalize_address(command.token1, field_name="token1")
        if token0_address == token1_address:
            raise InvalidAddressError("token0 and token1 must differ.")
        if command.dex is not None and command.dex not in self._dex_names:
            raise UnknownDexError(f"Unknown dex: {command.dex}")

        token0 = self._load_token(token0_address, command.chain_id)
        token1 = self._load_token(token1_address, command.chain_id)

        routing = self._routing_tokens.get(command.chain_id)
        if routing is not None and token1.address == routing.usdc.address:
            distribution = self._aggregator.execute(
                AggregateLiquidityInput(
                    base_token=token0.address,
                    chain_id=command.chain_id,
                    dex=command.dex,
                )
            )
        else:
            distribution = self._direct_distribution(
                token0=token0,
                token1=token1,
                chain_id=command.chain_id,
                dex=command.dex,
            )

        buy_walls, sell_walls = extract_walls(distribution, bucket_count=self._wall_count)
        logger.info(
            "get_liquidity_walls: token0=%s token1=%s chain_id=%s buy=%s sell=%s",
            token0.address,
            token1.address,
            command.chain_id,
            len(buy_walls),
            len(sell_walls),
        )
        return LiquidityWalls(
            token0=token0,
            token1=token1,
            price=distribution.current_price,
            buy_walls=buy_walls,
            sell_walls=sell_walls,
            timestamp=distribution.timestamp,
        )

    def _load_token(self, address: str, chain_id: int) -> Token:
        token = self._store.get_token(address=address, chain_id=chain_id)
        if token is None:
            raise TokenNotFoundError(f"Token not found: {address}")
        return token

    def _direct_distribution(
        self,
        *,
        token0: Token,
        token1: Token,
        chain_id: int,
        dex: str | None,
    ) -> LiquidityDistribution:
        dexes = (dex,) if dex is not None else self._dex_names
        distributions = []
        for name in dexes:
            distribution = load_pair_distribution(
                store=self._store,
                token0=token0.address,
                token1=token1.address,
                dex=name,
                chain_id=chain_id,
            )
            if distribution is not None:
                distributions.append(distribution)
        if not distributions:
            raise DistributionNotFoundError(
                f"Liquidity distribution not found for {token0.symbol}/{token1.symbol}"
            )
        return merge_distributions(distributions)
