from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal

import uvicorn

from liquidity_walls.application.use_cases.index_liquidity import IndexLiquidityUseCase
from liquidity_walls.domain.exceptions import ConfigError, DomainError, UnknownDexError
from liquidity_walls.infrastructure.clients.evm_rpc_client import EvmRpcClient, EvmRpcClientSettings
from liquidity_walls.infrastructure.db.engine import get_engine
from liquidity_walls.infrastructure.db.repositories.distribution_store_repository import (
    SqlDistributionStore,
)
from liquidity_walls.infrastructure.dexes.registry import build_dex_adapter
from liquidity_walls.shared.config import (
    CONFIG_PATH_ENV,
    Settings,
    apply_env_overrides,
    get_settings,
    load_settings,
)


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="liquidity-walls", description="DEX liquidity walls service.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    api = subparsers.add_parser("api", help="Serve the HTTP API.")
    api.add_argument("--config", required=True, help="Path to the TOML config file.")

    index = subparsers.add_parser("index", help="Run the indexer loop or index a single pool.")
    index.add_argument("--config", required=True, help="Path to the TOML config file.")
    index.add_argument("--dex", default=None, help="Only index this DEX.")
    index.add_argument("--pair", default=None, help="Index a single pool address and exit (requires --dex).")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "index" and args.pair and not args.dex:
        logger.error("cli: --pair requires --dex")
        return EXIT_USAGE

    try:
        settings = apply_env_overrides(load_settings(args.config))
    except ConfigError as exc:
        logger.error("cli: invalid configuration path=%s error=%s", args.config, exc)
        return EXIT_FAILURE

    if args.command == "api":
        return run_api(settings, config_path=args.config)
    return run_indexer(settings, dex=args.dex, pair=args.pair)


def run_api(settings: Settings, *, config_path: str) -> int:
    os.environ[CONFIG_PATH_ENV] = str(config_path)
    get_settings.cache_clear()
    logger.info("cli: starting api host=%s port=%s", settings.api.host, settings.api.port)
    uvicorn.run("liquidity_walls.main:app", host=settings.api.host, port=settings.api.port)
    return EXIT_OK


def build_indexer(settings: Settings, *, dex: str | None = None) -> IndexLiquidityUseCase:
    store = SqlDistributionStore(get_engine(settings.database.url))
    clients: dict[int, EvmRpcClient] = {}
    adapters = []
    for dex_settings in settings.enabled_dexes:
        if dex is not None and dex_settings.name != dex:
            continue
        rpc_settings = settings.rpc.get(dex_settings.chain_id)
        if rpc_settings is None:
            raise ConfigError(f"No RPC endpoint configured for chain_id={dex_settings.chain_id}")
        if dex_settings.chain_id not in clients:
            clients[dex_settings.chain_id] = EvmRpcClient(
                EvmRpcClientSettings(
                    url=rpc_settings.url,
                    chain_id=rpc_settings.chain_id,
                    timeout_seconds=rpc_settings.timeout_secs,
                )
            )
        adapters.append(
            build_dex_adapter(
                dex_settings,
                rpc=clients[dex_settings.chain_id],
                store=store,
                tick_word_radius=settings.indexer.tick_word_radius,
            )
        )
    if dex is not None and not adapters:
        raise UnknownDexError(f"Unknown or disabled dex: {dex}")

    return IndexLiquidityUseCase(
        adapters=adapters,
        store=store,
        batch_size=settings.indexer.batch_size,
        interval_seconds=settings.indexer.interval_secs,
        max_concurrency=settings.indexer.max_concurrency,
    )


def run_indexer(settings: Settings, *, dex: str | None, pair: str | None) -> int:
    try:
        indexer = build_indexer(settings, dex=dex)
        if pair is not None:
            asyncio.run(indexer.index_pool(dex=dex, address=pair))
        else:
            asyncio.run(_run_until_signalled(indexer))
    except DomainError as exc:
        logger.error("cli: indexer failed error=%s", exc)
        return EXIT_FAILURE
    return EXIT_OK


async def _run_until_signalled(indexer: IndexLiquidityUseCase) -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loops; Ctrl+C still raises KeyboardInterrupt there.
            logger.debug("cli: signal handlers unavailable signal=%s", sig)
    await indexer.run_forever(stop_event)


if __name__ == "__main__":
    raise SystemExit(main())
