from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class IndexCycleReport:
    pools_indexed: int = 0
    pools_failed: int = 0
    adapters_failed: list[str] = field(default_factory=list)
