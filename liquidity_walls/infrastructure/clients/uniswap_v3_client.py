from __future__ import annotations

import logging

from eth_abi import decode
from eth_utils import keccak

from liquidity_walls.domain.entities.pool_state import PopulatedTick
from liquidity_walls.infrastructure.clients.evm_rpc_client import EvmRpcClient


logger = logging.getLogger(__name__)

POOL_CREATED_TOPIC = "0x" + keccak(text="PoolCreated(address,address,uint24,int24,address)").hex()
DEFAULT_TICK_LENS_ADDRESS = "0xbfd8137f7d1516d3ea5ca83523914859ec47f573"

POOL_ABI = [
    {
        "inputs": [],
        "name": "slot0",
        "outputs": [
            {"internalType": "uint160", "name": "sqrtPriceX96", "type": "uint160"},
            {"internalType": "int24", "name": "tick", "type": "int24"},
            {"internalType": "uint16", "name": "observationIndex", "type": "uint16"},
            {"internalType": "uint16", "name": "observationCardinality", "type": "uint16"},
            {"internalType": "uint16", "name": "observationCardinalityNext", "type": "uint16"},
            {"internalType": "uint8", "name": "feeProtocol", "type": "uint8"},
            {"internalType": "bool", "name": "unlocked", "type": "bool"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "liquidity",
        "outputs": [{"internalType": "uint128", "name": "", "type": "uint128"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "tickSpacing",
        "outputs": [{"internalType": "int24", "name": "", "type": "int24"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "fee",
        "outputs": [{"internalType": "uint24", "name": "", "type": "uint24"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "token0",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "token1",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "int16", "name": "", "type": "int16"}],
        "name": "tickBitmap",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
]

TICK_LENS_ABI = [
    {
        "inputs": [
            {"internalType": "address", "name": "pool", "type": "address"},
            {"internalType": "int16", "name": "tickBitmapIndex", "type": "int16"},
        ],
        "name": "getPopulatedTicksInWord",
        "outputs": [
            {
                "components": [
                    {"internalType": "int24", "name": "tick", "type": "int24"},
                    {"internalType": "int128", "name": "liquidityNet", "type": "int128"},
                    {"internalType": "uint128", "name": "liquidityGross", "type": "uint128"},
                ],
                "internalType": "struct ITickLens.PopulatedTick[]",
                "name": "populatedTicks",
                "type": "tuple[]",
            }
        ],
        "stateMutability": "view",
        "type": "function",
    }
]


class UniswapV3Client:
    def __init__(self, rpc: EvmRpcClient, *, tick_lens_address: str = DEFAULT_TICK_LENS_ADDRESS):
        self._rpc = rpc
        self._tick_lens_address = tick_lens_address

    async def created_pools(
        self,
        factory: str,
        *,
        from_block: int,
        limit: int,
        chunk_size: int,
    ) -> list[str]:
        latest = await self._rpc.block_number()
        pools: list[str] = []
        start = from_block
        while start <= latest and len(pools) < limit:
            end = min(start + chunk_size - 1, latest)
            logs = await self._rpc.get_logs(
                {
                    "address": self._rpc.web3.to_checksum_address(factory),
                    "topics": [POOL_CREATED_TOPIC],
                    "fromBlock": start,
                    "toBlock": end,
                }
            )
            for log in logs:
                _tick_spacing, pool = decode(["int24", "address"], bytes(log["data"]))
                pools.append(str(pool).lower())
            logger.info(
                "uniswap_v3_client: scanned PoolCreated from=%s to=%s found=%s",
                start,
                end,
                len(pools),
            )
            start = end + 1
        return pools[:limit]

    async def pool_immutables(self, pool: str) -> tuple[str, str, int, int]:
        contract = self._rpc.contract(pool, POOL_ABI)
        token0 = await self._rpc.call(lambda: contract.functions.token0().call(), what=f"token0:{pool}")
        token1 = await self._rpc.call(lambda: contract.functions.token1().call(), what=f"token1:{pool}")
        fee = await self._rpc.call(lambda: contract.functions.fee().call(), what=f"fee:{pool}")
        spacing = await self._rpc.call(lambda: contract.functions.tickSpacing().call(), what=f"tickSpacing:{pool}")
        return str(token0).lower(), str(token1).lower(), int(fee), int(spacing)

    async def slot0(self, pool: str) -> tuple[int, int]:
        contract = self._rpc.contract(pool, POOL_ABI)
        result = await self._rpc.call(lambda: contract.functions.slot0().call(), what=f"slot0:{pool}")
        return int(result[0]), int(result[1])

    async def active_liquidity(self, pool: str) -> int:
        contract = self._rpc.contract(pool, POOL_ABI)
        value = await self._rpc.call(lambda: contract.functions.liquidity().call(), what=f"liquidity:{pool}")
        return int(value)

    async def tick_bitmap(self, pool: str, word: int) -> int:
        contract = self._rpc.contract(pool, POOL_ABI)
        value = await self._rpc.call(
            lambda: contract.functions.tickBitmap(word).call(),
            what=f"tickBitmap:{pool}:{word}",
        )
        return int(value)

    async def populated_ticks_in_word(self, pool: str, word: int) -> list[PopulatedTick]:
        lens = self._rpc.contract(self._tick_lens_address, TICK_LENS_ABI)
        rows = await self._rpc.call(
            lambda: lens.functions.getPopulatedTicksInWord(
                self._rpc.web3.to_checksum_address(pool),
                word,
            ).call(),
            what=f"getPopulatedTicksInWord:{pool}:{word}",
        )
        return [
            PopulatedTick(tick=int(tick), liquidity_net=int(net), liquidity_gross=int(gross))
            for tick, net, gross in rows
        ]

    async def block_number(self) -> int:
        return await self._rpc.block_number()
