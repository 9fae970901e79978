"""
Пакетное вычисление расстояний до центров и построчные argmin.

Формула ||x - c||² = ||x||² - 2x·c + ||c||² даёт одно матричное умножение
и две редукции вместо материализации (N, K, D).
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .exceptions import DimensionMismatch
from .config import Layout


def _check_dims(X: np.ndarray, M: np.ndarray, layout: Layout) -> None:
    axis = 1 if layout is Layout.POINTS_MAJOR else 0
    if X.ndim != 2 or M.ndim != 2:
        raise DimensionMismatch(
            f"points and centers must be 2-D, got {X.ndim}-D and {M.ndim}-D"
        )
    if X.shape[axis] != M.shape[axis]:
        raise DimensionMismatch(
            f"points have {X.shape[axis]} features, centers have {M.shape[axis]} "
            f"(layout={layout.value})"
        )


def linear_terms(
    X: np.ndarray, M: np.ndarray, layout: Layout = Layout.POINTS_MAJOR
) -> np.ndarray:
    """
    Линеаризованная часть квадрата расстояния: -2<x_i, mu_j> + ||mu_j||².

    ||x_i||² не входит: его добавляют поточечно в основном проходе.

    Returns:
        (N, K) для points-major, (K, N) для features-major
    """
    layout = Layout(layout)
    _check_dims(X, M, layout)
    if layout is Layout.POINTS_MAJOR:
        m_sq = np.sum(M * M, axis=1)  # (K,)
        terms = X @ M.T  # (N, K)
        terms *= -2.0
        terms += m_sq[None, :]
    else:
        m_sq = np.sum(M * M, axis=0)  # (K,)
        terms = M.T @ X  # (K, N)
        terms *= -2.0
        terms += m_sq[:, None]
    return terms


def dist_to_centers(
    X: np.ndarray,
    M: np.ndarray,
    sq: bool = False,
    layout: Layout = Layout.POINTS_MAJOR,
) -> np.ndarray:
    """
    Все расстояния между точками и центрами.

    Args:
        X: точки, (N, D) или (D, N)
        M: центры, (K, D) или (D, K)
        sq: вернуть квадраты расстояний
        layout: физическая раскладка обоих массивов

    Returns:
        (N, K) для points-major, (K, N) для features-major

    Raises:
        DimensionMismatch: если D у точек и центров различается
    """
    layout = Layout(layout)
    norm2 = linear_terms(X, M, layout)
    if layout is Layout.POINTS_MAJOR:
        norm2 += np.sum(X * X, axis=1)[:, None]
    else:
        norm2 += np.sum(X * X, axis=0)[None, :]
    # точка, совпадающая с центром, может дать -eps
    np.maximum(norm2, 0.0, out=norm2)
    if sq:
        return norm2
    return np.sqrt(norm2, out=norm2)


def row_mins(D: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Минимум и argmin каждой строки; при равенстве побеждает меньший индекс."""
    if D.ndim != 2 or D.shape[1] == 0:
        raise ValueError(f"row_mins expects a non-empty (N, K) matrix, got {D.shape}")
    idx = np.argmin(D, axis=1)
    vals = np.take_along_axis(D, idx[:, None], axis=1)[:, 0]
    return vals, idx.astype(np.int64, copy=False)


def col_mins(D: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Минимум и argmin каждого столбца; при равенстве побеждает меньший индекс."""
    if D.ndim != 2 or D.shape[0] == 0:
        raise ValueError(f"col_mins expects a non-empty (K, N) matrix, got {D.shape}")
    idx = np.argmin(D, axis=0)
    vals = np.take_along_axis(D, idx[None, :], axis=0)[0]
    return vals, idx.astype(np.int64, copy=False)


def nearest(
    X: np.ndarray, M: np.ndarray, layout: Layout = Layout.POINTS_MAJOR
) -> Tuple[np.ndarray, np.ndarray]:
    """Квадрат расстояния до ближайшего центра и его индекс для каждой точки."""
    layout = Layout(layout)
    D = dist_to_centers(X, M, sq=True, layout=layout)
    if layout is Layout.POINTS_MAJOR:
        return row_mins(D)
    return col_mins(D)
