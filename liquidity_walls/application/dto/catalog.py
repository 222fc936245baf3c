from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GetTokenInput:
    address: str
    chain_id: int


@dataclass(frozen=True)
class ListDexPoolsInput:
    dex: str
    chain_id: int
    limit: int = 100
    offset: int = 0
