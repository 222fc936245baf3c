from __future__ import annotations

import logging
from dataclasses import dataclass

from liquidity_walls.application.dto.liquidity_walls import AggregateLiquidityInput
from liquidity_walls.application.ports.distribution_store_port import DistributionStorePort
from liquidity_walls.application.use_cases.pair_distribution_loader import load_pair_distribution
from liquidity_walls.domain.entities.liquidity_distribution import LiquidityDistribution
from liquidity_walls.domain.entities.routing import RoutingTokens
from liquidity_walls.domain.entities.token import Token
from liquidity_walls.domain.exceptions import (
    DistributionNotFoundError,
    InvalidRequestError,
    UnknownDexError,
)
from liquidity_walls.domain.services.addresses import normalize_address
from liquidity_walls.domain.services.aggregation import (
    DEFAULT_BUCKET_COUNT,
    merge_distributions,
    rebase_distribution,
    rebucket_distribution,
    synthesize_distribution,
)


logger = logging.getLogger(__name__)

MODE_REBASE = "rebase"
MODE_SYNTHESIS = "synthesis"


@dataclass(frozen=True)
class _ReferencePrice:
    price: float
    distribution: LiquidityDistribution | None = None


class AggregateLiquidityUseCase:
    def __init__(
        self,
        *,
        store: DistributionStorePort,
        routing_tokens: dict[int, RoutingTokens],
        dex_names: tuple[str, ...],
        reference_dexes: tuple[str, ...],
        mode: str = MODE_REBASE,
        bucket_count: int = DEFAULT_BUCKET_COUNT,
    ):
        if mode not in (MODE_REBASE, MODE_SYNTHESIS):
            raise ValueError(f"Unsupported aggregation mode: {mode}")
        self._store = store
        self._routing_tokens = routing_tokens
        self._dex_names = dex_names
        self._reference_dexes = reference_dexes
        self._mode = mode
        self._bucket_count = bucket_count

    def execute(self, command: AggregateLiquidityInput) -> LiquidityDistribution:
        base = normalize_address(command.base_token, field_name="base_token")
        routing = self._routing_tokens.get(command.chain_id)
        if routing is None:
            raise InvalidRequestError(f"No routing tokens configured for chain_id={command.chain_id}")
        if base == routing.usdc.address:
            raise InvalidRequestError("Base token cannot be the quote token.")

        if command.dex is not None and command.dex not in self._dex_names:
            raise UnknownDexError(f"Unknown dex: {command.dex}")
        dexes = (command.dex,) if command.dex is not None else self._dex_names

        usdc = self._store.get_token(address=routing.usdc.address, chain_id=command.chain_id) or routing.usdc
        references: dict[str, _ReferencePrice | None] = {}
        legs: list[LiquidityDistribution] = []
        found_direct = False
        for dex in dexes:
            direct = load_pair_distribution(
                store=self._store,
                token0=base,
                token1=routing.usdc.address,
                dex=dex,
                chain_id=command.chain_id,
            )
            if direct is not None:
                found_direct = True
                if direct.price_levels:
                    legs.append(direct)

            for quote in routing.quotes:
                if quote.address == base:
                    continue
                leg = self._quote_leg(
                    base=base,
                    quote=quote,
                    usdc=usdc,
                    routing=routing,
                    dex=dex,
                    chain_id=command.chain_id,
                    references=references,
                )
                if leg is not None and leg.price_levels:
                    legs.append(leg)

        if not found_direct:
            raise DistributionNotFoundError("USDC pair distribution not found")
        if not legs:
            raise DistributionNotFoundError(f"No liquidity found for token {base}")

        logger.info(
            "aggregate_liquidity: merged legs base=%s chain_id=%s legs=%s mode=%s",
            base,
            command.chain_id,
            len(legs),
            self._mode,
        )
        merged = merge_distributions(legs)
        return rebucket_distribution(merged, bucket_count=self._bucket_count)

    def _quote_leg(
        self,
        *,
        base: str,
        quote: Token,
        usdc: Token,
        routing: RoutingTokens,
        dex: str,
        chain_id: int,
        references: dict[str, _ReferencePrice | None],
    ) -> LiquidityDistribution | None:
        distribution = load_pair_distribution(
            store=self._store,
            token0=base,
            token1=quote.address,
            dex=dex,
            chain_id=chain_id,
        )
        if distribution is None or not distribution.price_levels:
            return None

        if quote.address not in references:
            references[quote.address] = self._reference_price(quote=quote, routing=routing, chain_id=chain_id)
        reference = references[quote.address]
        if reference is None:
            logger.warning(
                "aggregate_liquidity: missing reference price quote=%s chain_id=%s dex=%s",
                quote.symbol,
                chain_id,
                dex,
            )
            return None

        if self._mode == MODE_SYNTHESIS and reference.distribution is not None:
            return synthesize_distribution(
                distribution,
                reference.distribution,
                bucket_count=self._bucket_count,
            )
        return rebase_distribution(distribution, factor=reference.price, quote_token=usdc)

    def _reference_price(
        self,
        *,
        quote: Token,
        routing: RoutingTokens,
        chain_id: int,
    ) -> _ReferencePrice | None:
        for dex in self._reference_dexes:
            reference = load_pair_distribution(
                store=self._store,
                token0=quote.address,
                token1=routing.usdc.address,
                dex=dex,
                chain_id=chain_id,
            )
            if reference is not None and reference.current_price > 0:
                return _ReferencePrice(price=reference.current_price, distribution=reference)
        if quote.address in routing.stables:
            return _ReferencePrice(price=1.0)
        return None

