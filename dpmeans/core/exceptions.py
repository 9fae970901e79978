"""
Исключения и предупреждения DP-means.

Ошибки формы входных данных фатальны и поднимаются до начала вычислений.
Предупреждения не прерывают fit: результат последней итерации возвращается.
"""

from __future__ import annotations

import os
import warnings


class DPMeansError(Exception):
    """Базовое исключение пакета."""


class DimensionMismatch(DPMeansError, ValueError):
    """Размерность признаков точек и центров не совпадает."""


class InvalidShapeError(DPMeansError, ValueError):
    """Число точек не больше числа признаков (или массив не двумерный)."""


class NonConvergenceWarning(UserWarning):
    """Достигнут max_iter без выполнения критерия по изменению целевой функции."""


class DegenerateCollapseWarning(UserWarning):
    """Порог схлопывания удалил бы все кластеры; порог был ослаблен."""


# Каталог пакета: кадры внутри него пропускаются при выборе строки предупреждения
_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__))) + os.sep


def warn_external(message: str, category: type[Warning]) -> None:
    """Предупреждение, привязанное к первой строке вызывающего кода вне dpmeans."""
    warnings.warn(message, category, skip_file_prefixes=(_PACKAGE_DIR,))
