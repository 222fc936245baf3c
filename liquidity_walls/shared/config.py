from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, replace
from functools import lru_cache
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from liquidity_walls.domain.exceptions import ConfigError


load_dotenv()

CONFIG_PATH_ENV = "LIQUIDITY_WALLS_CONFIG"
DATABASE_URL_ENV = "LIQUIDITY_WALLS_DATABASE_URL"

CHAIN_IDS = {
    "ethereum": 1,
    "polygon": 137,
    "arbitrum": 42161,
    "optimism": 10,
}


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


@dataclass(frozen=True)
class RpcSettings:
    chain: str
    chain_id: int
    url: str
    timeout_secs: float = 30.0


@dataclass(frozen=True)
class DatabaseSettings:
    url: str = "sqlite:///liquidity_walls.db"


@dataclass(frozen=True)
class ApiSettings:
    host: str = "127.0.0.1"
    port: int = 8080


@dataclass(frozen=True)
class IndexerSettings:
    interval_secs: float = 600.0
    batch_size: int = 1000
    max_concurrency: int = 1
    tick_word_radius: int | None = 32


@dataclass(frozen=True)
class AggregatorSettings:
    mode: str = "rebase"
    bucket_count: int = 64
    wall_count: int = 64
    reference_dexes: tuple[str, ...] = ("uniswap_v3", "uniswap_v2", "sushiswap")


@dataclass(frozen=True)
class DexSettings:
    name: str
    chain_id: int
    factory_address: str
    enabled: bool = True
    fee: int | None = None
    pools: tuple[str, ...] = ()
    start_block: int | None = None
    tick_lens_address: str | None = None
    log_chunk_size: int | None = None


DEFAULT_DEXES = (
    DexSettings(
        name="uniswap_v2",
        chain_id=1,
        factory_address="0x5c69bee701ef814a2b6a3edd4b1652cb9cc5aa6f",
    ),
    DexSettings(
        name="uniswap_v3",
        chain_id=1,
        factory_address="0x1f98431c8ad98523631ae4a59f267346ea31f984",
    ),
    DexSettings(
        name="sushiswap",
        chain_id=1,
        factory_address="0xc0aee478e3658e2610c5f7a4a2e1777ce9e4f2ac",
    ),
)


@dataclass(frozen=True)
class Settings:
    rpc: dict[int, RpcSettings] = field(default_factory=dict)
    database: DatabaseSettings = DatabaseSettings()
    api: ApiSettings = ApiSettings()
    indexer: IndexerSettings = IndexerSettings()
    aggregator: AggregatorSettings = AggregatorSettings()
    dexes: tuple[DexSettings, ...] = DEFAULT_DEXES

    @property
    def enabled_dexes(self) -> tuple[DexSettings, ...]:
        return tuple(dex for dex in self.dexes if dex.enabled)

    @property
    def dex_names(self) -> tuple[str, ...]:
        names: list[str] = []
        for dex in self.enabled_dexes:
            if dex.name not in names:
                names.append(dex.name)
        return tuple(names)


def default_settings() -> Settings:
    return Settings(
        rpc={1: RpcSettings(chain="ethereum", chain_id=1, url="https://eth.llamarpc.com")},
    )


def load_settings(path: str | Path) -> Settings:
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    try:
        document = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    try:
        return parse_settings(document)
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid config {path}: {exc}") from exc


def parse_settings(document: dict[str, Any]) -> Settings:
    rpc: dict[int, RpcSettings] = {}
    for chain, chain_id in CHAIN_IDS.items():
        section = document.get(chain)
        if section is None:
            continue
        url = str(section["url"])
        if not url:
            raise ValueError(f"{chain}.url must not be empty")
        rpc[chain_id] = RpcSettings(
            chain=chain,
            chain_id=chain_id,
            url=url,
            timeout_secs=float(section.get("timeout_secs", 30)),
        )

    database = DatabaseSettings()
    if "database" in document:
        database = DatabaseSettings(url=normalize_database_url(str(document["database"]["url"])))

    api_section = document.get("api", {})
    api = ApiSettings(
        host=str(api_section.get("host", ApiSettings.host)),
        port=int(api_section.get("port", ApiSettings.port)),
    )

    indexer_section = document.get("indexer", {})
    indexer = IndexerSettings(
        interval_secs=float(indexer_section.get("interval_secs", IndexerSettings.interval_secs)),
        batch_size=int(indexer_section.get("batch_size", IndexerSettings.batch_size)),
        max_concurrency=int(indexer_section.get("max_concurrency", IndexerSettings.max_concurrency)),
        tick_word_radius=_optional_int(indexer_section.get("tick_word_radius", IndexerSettings.tick_word_radius)),
    )
    if indexer.batch_size < 1 or indexer.max_concurrency < 1 or indexer.interval_secs <= 0:
        raise ValueError("indexer.batch_size, indexer.max_concurrency and indexer.interval_secs must be positive")

    aggregator_section = document.get("aggregator", {})
    aggregator = AggregatorSettings(
        mode=str(aggregator_section.get("mode", AggregatorSettings.mode)),
        bucket_count=int(aggregator_section.get("bucket_count", AggregatorSettings.bucket_count)),
        wall_count=int(aggregator_section.get("wall_count", AggregatorSettings.wall_count)),
        reference_dexes=tuple(
            str(name) for name in aggregator_section.get("reference_dexes", AggregatorSettings.reference_dexes)
        ),
    )
    if aggregator.mode not in ("rebase", "synthesis"):
        raise ValueError(f"aggregator.mode must be 'rebase' or 'synthesis', got {aggregator.mode!r}")
    if aggregator.bucket_count < 1 or aggregator.wall_count < 1:
        raise ValueError("aggregator.bucket_count and aggregator.wall_count must be >= 1")

    dexes = DEFAULT_DEXES
    if "dexes" in document:
        dexes = tuple(_parse_dex(item) for item in document["dexes"])

    return Settings(
        rpc=rpc,
        database=database,
        api=api,
        indexer=indexer,
        aggregator=aggregator,
        dexes=dexes,
    )


def _parse_dex(item: dict[str, Any]) -> DexSettings:
    return DexSettings(
        name=str(item["name"]),
        chain_id=int(item["chain_id"]),
        factory_address=str(item["factory_address"]).lower(),
        enabled=bool(item.get("enabled", True)),
        fee=_optional_int(item.get("fee")),
        pools=tuple(str(address).lower() for address in item.get("pools", ())),
        start_block=_optional_int(item.get("start_block")),
        tick_lens_address=str(item["tick_lens_address"]).lower() if item.get("tick_lens_address") else None,
        log_chunk_size=_optional_int(item.get("log_chunk_size")),
    )


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    return int(value)


def normalize_database_url(value: str) -> str:
    if "://" in value:
        return value
    return f"sqlite:///{value}"


def apply_env_overrides(settings: Settings) -> Settings:
    database_url = _env(DATABASE_URL_ENV)
    if database_url:
        settings = replace(settings, database=DatabaseSettings(url=normalize_database_url(database_url)))
    return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    path = _env(CONFIG_PATH_ENV)
    settings = load_settings(path) if path else default_settings()
    return apply_env_overrides(settings)
