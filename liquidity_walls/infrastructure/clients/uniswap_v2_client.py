from __future__ import annotations

from liquidity_walls.domain.entities.pool_state import ConstantProductState
from liquidity_walls.infrastructure.clients.evm_rpc_client import EvmRpcClient


FACTORY_ABI = [
    {
        "inputs": [],
        "name": "allPairsLength",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "name": "allPairs",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
]

PAIR_ABI = [
    {
        "inputs": [],
        "name": "getReserves",
        "outputs": [
            {"internalType": "uint112", "name": "_reserve0", "type": "uint112"},
            {"internalType": "uint112", "name": "_reserve1", "type": "uint112"},
            {"internalType": "uint32", "name": "_blockTimestampLast", "type": "uint32"},
        ],
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
]


class UniswapV2Client:
    def __init__(self, rpc: EvmRpcClient):
        self._rpc = rpc

    async def pair_count(self, factory: str) -> int:
        contract = self._rpc.contract(factory, FACTORY_ABI)
        value = await self._rpc.call(lambda: contract.functions.allPairsLength().call(), what="allPairsLength")
        return int(value)

    async def pair_at(self, factory: str, index: int) -> str:
        contract = self._rpc.contract(factory, FACTORY_ABI)
        value = await self._rpc.call(lambda: contract.functions.allPairs(index).call(), what=f"allPairs:{index}")
        return str(value).lower()

    async def pair_tokens(self, pair: str) -> tuple[str, str]:
        contract = self._rpc.contract(pair, PAIR_ABI)
        token0 = await self._rpc.call(lambda: contract.functions.token0().call(), what=f"token0:{pair}")
        token1 = await self._rpc.call(lambda: contract.functions.token1().call(), what=f"token1:{pair}")
        return str(token0).lower(), str(token1).lower()

    async def reserves(self, pair: str) -> ConstantProductState:
        contract = self._rpc.contract(pair, PAIR_ABI)
        reserve0, reserve1, block_timestamp_last = await self._rpc.call(
            lambda: contract.functions.getReserves().call(),
            what=f"getReserves:{pair}",
        )
        return ConstantProductState(
            reserve0=int(reserve0),
            reserve1=int(reserve1),
            block_timestamp_last=int(block_timestamp_last),
        )

    async def block_number(self) -> int:
        return await self._rpc.block_number()
