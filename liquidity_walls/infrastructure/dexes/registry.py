from __future__ import annotations

from liquidity_walls.application.ports.dex_adapter_port import DexAdapterPort
from liquidity_walls.application.ports.distribution_store_port import DistributionStorePort
from liquidity_walls.domain.exceptions import UnknownDexError
from liquidity_walls.infrastructure.clients.erc20_client import Erc20Client
from liquidity_walls.infrastructure.clients.evm_rpc_client import EvmRpcClient
from liquidity_walls.infrastructure.clients.uniswap_v2_client import UniswapV2Client
from liquidity_walls.infrastructure.clients.uniswap_v3_client import (
    DEFAULT_TICK_LENS_ADDRESS,
    UniswapV3Client,
)
from liquidity_walls.infrastructure.dexes.token_resolver import TokenResolver
from liquidity_walls.infrastructure.dexes.uniswap_v2 import DEFAULT_V2_FEE, UniswapV2Adapter
from liquidity_walls.infrastructure.dexes.uniswap_v3 import (
    DEFAULT_LOG_CHUNK_SIZE,
    DEFAULT_TICK_WORD_RADIUS,
    UNISWAP_V3_START_BLOCK,
    UniswapV3Adapter,
)
from liquidity_walls.shared.config import DexSettings


CONSTANT_PRODUCT_DEXES = frozenset({"uniswap_v2", "sushiswap"})
CONCENTRATED_LIQUIDITY_DEXES = frozenset({"uniswap_v3"})

def build_dex_adapter(
    dex: DexSettings,
    *,
    rpc: EvmRpcClient,
    store: DistributionStorePort | None = None,
    tick_word_radius: int | None = DEFAULT_TICK_WORD_RADIUS,
) -> DexAdapterPort:
    tokens = TokenResolver(chain_id=dex.chain_id, reader=Erc20Client(rpc), store=store)
    if dex.name in CONSTANT_PRODUCT_DEXES:
        return UniswapV2Adapter(
            name=dex.name,
            chain_id=dex.chain_id,
            factory=dex.factory_address,
            reader=UniswapV2Client(rpc),
            tokens=tokens,
            fee=dex.fee if dex.fee is not None else DEFAULT_V2_FEE,
            pools=dex.pools,
        )
    if dex.name in CONCENTRATED_LIQUIDITY_DEXES:
        return UniswapV3Adapter(
            name=dex.name,
            chain_id=dex.chain_id,
            factory=dex.factory_address,
            reader=UniswapV3Client(rpc, tick_lens_address=dex.tick_lens_address or DEFAULT_TICK_LENS_ADDRESS),
            tokens=tokens,
            pools=dex.pools,
            start_block=dex.start_block if dex.start_block is not None else UNISWAP_V3_START_BLOCK,
            log_chunk_size=dex.log_chunk_size or DEFAULT_LOG_CHUNK_SIZE,
            tick_word_radius=tick_word_radius,
        )
    raise UnknownDexError(f"Unsupported dex: {dex.name}")
