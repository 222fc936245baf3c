from __future__ import annotations

from liquidity_walls.infrastructure.clients.evm_rpc_client import EvmRpcClient


ERC20_ABI = [
    {
        "inputs": [],
        "name": "symbol",
        "outputs": [{"internalType": "string", "name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "name",
        "outputs": [{"internalType": "string", "name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"internalType": "uint8", "name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
]


class Erc20Client:
    def __init__(self, rpc: EvmRpcClient):
        self._rpc = rpc

    async def token_metadata(self, address: str) -> tuple[str, str, int]:
        contract = self._rpc.contract(address, ERC20_ABI)
        symbol = await self._rpc.call(lambda: contract.functions.symbol().call(), what=f"symbol:{address}")
        name = await self._rpc.call(lambda: contract.functions.name().call(), what=f"name:{address}")
        decimals = await self._rpc.call(lambda: contract.functions.decimals().call(), what=f"decimals:{address}")
        return str(symbol), str(name), int(decimals)
