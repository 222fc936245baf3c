from __future__ import annotations

import logging
from threading import Lock

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from liquidity_walls.application.ports.distribution_store_port import DistributionStorePort
from liquidity_walls.domain.entities.liquidity_distribution import LiquidityDistribution
from liquidity_walls.domain.entities.pool import Pool
from liquidity_walls.domain.entities.token import Token
from liquidity_walls.domain.exceptions import DatabaseError
from liquidity_walls.infrastructure.db.engine import Base
from liquidity_walls.infrastructure.db.mappers.liquidity_mapper import (
    deserialize_distribution,
    map_row_to_pool,
    map_row_to_token,
    serialize_distribution,
)
from liquidity_walls.infrastructure.db.models import liquidity as _models  # noqa: F401


logger = logging.getLogger(__name__)

_UPSERT_TOKEN_SQL = """
    INSERT INTO tokens (address, chain_id, name, symbol, decimals)
    VALUES (:address, :chain_id, :name, :symbol, :decimals)
    ON CONFLICT (address, chain_id) DO NOTHING
"""

_UPSERT_POOL_SQL = """
    INSERT INTO pools (
        address, chain_id, dex, token0_address, token1_address, fee, tick_spacing,
        creation_block, creation_timestamp, last_updated_block, last_updated_timestamp,
        inserted_seq
    ) VALUES (
        :address, :chain_id, :dex, :token0_address, :token1_address, :fee, :tick_spacing,
        :creation_block, :creation_timestamp, :last_updated_block, :last_updated_timestamp,
        (SELECT COALESCE(MAX(inserted_seq), 0) + 1 FROM pools)
    )
    ON CONFLICT (address, chain_id) DO UPDATE SET
        dex = excluded.dex,
        token0_address = excluded.token0_address,
        token1_address = excluded.token1_address,
        fee = excluded.fee,
        tick_spacing = excluded.tick_spacing,
        last_updated_block = excluded.last_updated_block,
        last_updated_timestamp = excluded.last_updated_timestamp
"""

_UPSERT_DISTRIBUTION_SQL = """
    INSERT INTO liquidity_distributions (token0_address, token1_address, dex, chain_id, data, timestamp)
    VALUES (:token0_address, :token1_address, :dex, :chain_id, :data, :timestamp)
    ON CONFLICT (token0_address, token1_address, dex, chain_id) DO UPDATE SET
        data = excluded.data,
        timestamp = excluded.timestamp
"""

_POOL_SELECT_SQL = """
    SELECT
        p.address, p.chain_id, p.dex, p.fee, p.tick_spacing,
        p.creation_block, p.creation_timestamp, p.last_updated_block, p.last_updated_timestamp,
        t0.address AS token0_address, t0.chain_id AS token0_chain_id, t0.name AS token0_name,
        t0.symbol AS token0_symbol, t0.decimals AS token0_decimals,
        t1.address AS token1_address, t1.chain_id AS token1_chain_id, t1.name AS token1_name,
        t1.symbol AS token1_symbol, t1.decimals AS token1_decimals
    FROM pools p
    JOIN tokens t0 ON t0.address = p.token0_address AND t0.chain_id = p.chain_id
    JOIN tokens t1 ON t1.address = p.token1_address AND t1.chain_id = p.chain_id
"""


def _token_params(token: Token) -> dict:
    return {
        "address": token.address,
        "chain_id": token.chain_id,
        "name": token.name,
        "symbol": token.symbol,
        "decimals": token.decimals,
    }


class SqlDistributionStore(DistributionStorePort):
    """Relational store for tokens, pools and the latest distribution per pair.

    Writes go through one lock and one transaction each; reads open their own
    connection and never wait on the lock.
    """

    def __init__(self, engine, *, create_schema: bool = True):
        self._engine = engine
        self._write_lock = Lock()
        if create_schema:
            self.create_schema()

    def create_schema(self) -> None:
        try:
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as exc:
            raise DatabaseError(f"Cannot create schema: {exc}") from exc

    def upsert_token(self, token: Token) -> None:
        with self._write_lock:
            try:
                with self._engine.begin() as conn:
                    conn.execute(text(_UPSERT_TOKEN_SQL), _token_params(token))
            except SQLAlchemyError as exc:
                raise DatabaseError(f"Cannot store token {token.address}: {exc}") from exc

    def upsert_pool(self, pool: Pool) -> None:
        params = {
            "address": pool.address,
            "chain_id": pool.chain_id,
            "dex": pool.dex,
            "token0_address": pool.token0.address,
            "token1_address": pool.token1.address,
            "fee": pool.fee,
            "tick_spacing": pool.tick_spacing,
            "creation_block": pool.creation_block,
            "creation_timestamp": pool.creation_timestamp,
            "last_updated_block": pool.last_updated_block,
            "last_updated_timestamp": pool.last_updated_timestamp,
        }
        with self._write_lock:
            try:
                with self._engine.begin() as conn:
                    conn.execute(text(_UPSERT_TOKEN_SQL), _token_params(pool.token0))
                    conn.execute(text(_UPSERT_TOKEN_SQL), _token_params(pool.token1))
                    conn.execute(text(_UPSERT_POOL_SQL), params)
            except SQLAlchemyError as exc:
                raise DatabaseError(f"Cannot store pool {pool.address}: {exc}") from exc

    def upsert(self, distribution: LiquidityDistribution) -> None:
        params = {
            "token0_address": distribution.token0.address,
            "token1_address": distribution.token1.address,
            "dex": distribution.dex,
            "chain_id": distribution.chain_id,
            "data": serialize_distribution(distribution),
            "timestamp": int(distribution.timestamp.timestamp()),
        }
        with self._write_lock:
            try:
                with self._engine.begin() as conn:
                    conn.execute(text(_UPSERT_TOKEN_SQL), _token_params(distribution.token0))
                    conn.execute(text(_UPSERT_TOKEN_SQL), _token_params(distribution.token1))
                    conn.execute(text(_UPSERT_DISTRIBUTION_SQL), params)
            except SQLAlchemyError as exc:
                raise DatabaseError(
                    f"Cannot store distribution {distribution.token0.address}/{distribution.token1.address}: {exc}"
                ) from exc
        logger.debug(
            "distribution_store: upserted dex=%s token0=%s token1=%s levels=%s",
            distribution.dex,
            distribution.token0.address,
            distribution.token1.address,
            len(distribution.price_levels),
        )

    def get(
        self,
        *,
        token0: str,
        token1: str,
        dex: str,
        chain_id: int,
    ) -> LiquidityDistribution | None:
        sql = """
            SELECT data
            FROM liquidity_distributions
            WHERE token0_address = :token0
              AND token1_address = :token1
              AND dex = :dex
              AND chain_id = :chain_id
            LIMIT 1
        """
        params = {"token0": token0.lower(), "token1": token1.lower(), "dex": dex, "chain_id": chain_id}
        try:
            with self._engine.connect() as conn:
                row = conn.execute(text(sql), params).mappings().first()
        except SQLAlchemyError as exc:
            raise DatabaseError(f"Cannot read distribution: {exc}") from exc
        if row is None:
            return None
        return deserialize_distribution(row["data"])

    def list_pools(self, *, dex: str, chain_id: int, limit: int, offset: int = 0) -> list[str]:
        sql = """
            SELECT address
            FROM pools
            WHERE dex = :dex
              AND chain_id = :chain_id
            ORDER BY inserted_seq
            LIMIT :limit OFFSET :offset
        """
        params = {"dex": dex, "chain_id": chain_id, "limit": limit, "offset": offset}
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(text(sql), params).mappings().all()
        except SQLAlchemyError as exc:
            raise DatabaseError(f"Cannot list pools: {exc}") from exc
        return [row["address"] for row in rows]

    def get_pool(self, *, address: str, chain_id: int | None = None) -> Pool | None:
        chain_filter = "AND p.chain_id = :chain_id" if chain_id is not None else ""
        sql = _POOL_SELECT_SQL + """
            WHERE p.address = :address
              {chain_filter}
            ORDER BY p.inserted_seq
            LIMIT 1
        """.format(chain_filter=chain_filter)
        params = {"address": address.lower()}
        if chain_id is not None:
            params["chain_id"] = chain_id
        try:
            with self._engine.connect() as conn:
                row = conn.execute(text(sql), params).mappings().first()
        except SQLAlchemyError as exc:
            raise DatabaseError(f"Cannot read pool {address}: {exc}") from exc
        if row is None:
            return None
        return map_row_to_pool(row)

    def get_token(self, *, address: str, chain_id: int) -> Token | None:
        sql = """
            SELECT address, chain_id, name, symbol, decimals
            FROM tokens
            WHERE address = :address
              AND chain_id = :chain_id
            LIMIT 1
        """
        try:
            with self._engine.connect() as conn:
                row = conn.execute(
                    text(sql),
                    {"address": address.lower(), "chain_id": chain_id},
                ).mappings().first()
        except SQLAlchemyError as exc:
            raise DatabaseError(f"Cannot read token {address}: {exc}") from exc
        if row is None:
            return None
        return map_row_to_token(row)
