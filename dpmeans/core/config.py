from __future__ import annotations

from enum import Enum


class Layout(str, Enum):
    """Физическая раскладка матрицы точек."""

    POINTS_MAJOR = "points"  # (N, D): строка i = точка i
    FEATURES_MAJOR = "features"  # (D, N): столбец i = точка i


# Относительный порог сходимости по целевой функции
OBJECTIVE_TOL: float = 1e-3

# Множитель ослабления порога, если схлопывание удалило бы все кластеры
COLLAPSE_DAMPING: float = 0.9
