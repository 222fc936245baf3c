from __future__ import annotations

from dataclasses import dataclass

from liquidity_walls.domain.entities.token import Token


@dataclass(frozen=True)
class RoutingTokens:
    usdc: Token
    quotes: tuple[Token, ...]
    stables: frozenset[str] = frozenset()


def _routing_tokens(
    chain_id: int,
    *,
    usdc: str,
    weth: str,
    usdt: str,
    dai: str,
    wbtc: str,
) -> RoutingTokens:
    return RoutingTokens(
        usdc=Token(address=usdc, chain_id=chain_id, symbol="USDC", name="USD Coin", decimals=6),
        quotes=(
            Token(address=weth, chain_id=chain_id, symbol="WETH", name="Wrapped Ether", decimals=18),
            Token(address=usdt, chain_id=chain_id, symbol="USDT", name="Tether USD", decimals=6),
            Token(address=dai, chain_id=chain_id, symbol="DAI", name="Dai Stablecoin", decimals=18),
            Token(address=wbtc, chain_id=chain_id, symbol="WBTC", name="Wrapped BTC", decimals=8),
        ),
        stables=frozenset({usdt, dai}),
    )


MAINNET_ROUTING_TOKENS = _routing_tokens(
    1,
    usdc="0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",
    weth="0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",
    usdt="0xdac17f958d2ee523a2206206994597c13d831ec7",
    dai="0x6b175474e89094c44da98b954eedeac495271d0f",
    wbtc="0x2260fac5e5542a773aa44fbcfedf7c193bc2c599",
)

# Native USDC on each L2/sidechain, not the bridged USDC.e.
POLYGON_ROUTING_TOKENS = _routing_tokens(
    137,
    usdc="0x3c499c542cef5e3811e1192ce70d8cc03d5c3359",
    weth="0x7ceb23fd6bc0add59e62ac25578270cff1b9f619",
    usdt="0xc2132d05d31c914a87c6611c10748aeb04b58e8f",
    dai="0x8f3cf7ad23cd3cadbd9735aff958023239c6a063",
    wbtc="0x1bfd67037b42cf73acf2047067bd4f2c47d9bfd6",
)

ARBITRUM_ROUTING_TOKENS = _routing_tokens(
    42161,
    usdc="0xaf88d065e77c8cc2239327c5edb3a432268e5831",
    weth="0x82af49447d8a07e3bd95bd0d56f35241523fbab1",
    usdt="0xfd086bc7cd5c481dcc9c85ebe478a1c0b69fcbb9",
    dai="0xda10009cbd5d07dd0cecc66161fc93d7c9000da1",
    wbtc="0x2f2a2543b76a4166549f7aab2e75bef0aefc5b0f",
)

OPTIMISM_ROUTING_TOKENS = _routing_tokens(
    10,
    usdc="0x0b2c639c533813f4aa9d7837caf62653d097ff85",
    weth="0x4200000000000000000000000000000000000006",
    usdt="0x94b008aa00579c1307b0ef2c499ad98a8ce58e58",
    dai="0xda10009cbd5d07dd0cecc66161fc93d7c9000da1",
    wbtc="0x68f180fcce6836688e9084f035309e29bf0a2095",
)

DEFAULT_ROUTING_TOKENS: dict[int, RoutingTokens] = {
    1: MAINNET_ROUTING_TOKENS,
    137: POLYGON_ROUTING_TOKENS,
    42161: ARBITRUM_ROUTING_TOKENS,
    10: OPTIMISM_ROUTING_TOKENS,
}
