from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class BenchmarkConfig:
    """Параметры серии прогонов DP-means на одном датасете."""

    repeats: int = 10
    warmup: int = 1
    # Лимит стендового времени (warmup + замеры); None = без лимита
    max_seconds: Optional[float] = 1800.0

    def __post_init__(self) -> None:
        if self.repeats < 1:
            raise ValueError("repeats must be >= 1")
        if self.warmup < 0:
            raise ValueError("warmup must be >= 0")
