from __future__ import annotations

from sqlalchemy import BigInteger, ForeignKeyConstraint, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from liquidity_walls.infrastructure.db.engine import Base


class TokenModel(Base):
    __tablename__ = "tokens"

    address: Mapped[str] = mapped_column(Text, primary_key=True)
    chain_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    symbol: Mapped[str] = mapped_column(Text, nullable=False)
    decimals: Mapped[int] = mapped_column(Integer, nullable=False)


class PoolModel(Base):
    __tablename__ = "pools"
    __table_args__ = (
        ForeignKeyConstraint(["token0_address", "chain_id"], ["tokens.address", "tokens.chain_id"]),
        ForeignKeyConstraint(["token1_address", "chain_id"], ["tokens.address", "tokens.chain_id"]),
    )

    address: Mapped[str] = mapped_column(Text, primary_key=True)
    chain_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    dex: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    token0_address: Mapped[str] = mapped_column(Text, nullable=False)
    token1_address: Mapped[str] = mapped_column(Text, nullable=False)
    fee: Mapped[int] = mapped_column(Integer, nullable=False)
    tick_spacing: Mapped[int | None] = mapped_column(Integer, nullable=True)
    creation_block: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    creation_timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    last_updated_block: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    last_updated_timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    inserted_seq: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)


class LiquidityDistributionModel(Base):
    __tablename__ = "liquidity_distributions"

    token0_address: Mapped[str] = mapped_column(Text, primary_key=True)
    token1_address: Mapped[str] = mapped_column(Text, primary_key=True)
    dex: Mapped[str] = mapped_column(Text, primary_key=True)
    chain_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    data: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
