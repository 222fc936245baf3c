from __future__ import annotations

from liquidity_walls.application.ports.distribution_store_port import DistributionStorePort
from liquidity_walls.domain.entities.liquidity_distribution import LiquidityDistribution
from liquidity_walls.domain.services.pair_orientation import transpose_distribution


def load_pair_distribution(
    *,
    store: DistributionStorePort,
    token0: str,
    token1: str,
    dex: str,
    chain_id: int,
) -> LiquidityDistribution | None:
    """Read (token0, token1) as stored, or transpose the reverse pair."""
    direct = store.get(token0=token0, token1=token1, dex=dex, chain_id=chain_id)
    if direct is not None:
        return direct
    reverse = store.get(token0=token1, token1=token0, dex=dex, chain_id=chain_id)
    if reverse is None:
        return None
    return transpose_distribution(reverse)
