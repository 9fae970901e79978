"""
Метрики для анализа результатов DP-means.

Производительность: ускорение, эффективность и пропускная способность
бэкендов. Качество: точное значение целевой функции для итогового состояния
(трасса fit после схлопывания не пересчитывается).
"""

from __future__ import annotations

import numpy as np


def speedup(t_serial: float, t_parallel: float) -> float:
    """
    Ускорение параллельного бэкенда относительно numpy baseline.

    Raises:
        ZeroDivisionError: Если t_parallel равно нулю
    """
    if t_parallel == 0:
        raise ZeroDivisionError("Parallel time cannot be zero")
    return t_serial / t_parallel


def efficiency(speedup: float, p: int) -> float:
    """
    Параллельная эффективность: speedup / p. Идеал = 1.0.

    Raises:
        ZeroDivisionError: Если p равно нулю
    """
    if p == 0:
        raise ZeroDivisionError("Number of processes cannot be zero")
    return speedup / p


def throughput(
    N: int, K: int, D: int, n_iters: int, total_time: float
) -> float:
    """
    Пропускная способность пакетного шага: (N × K × D × n_iters) / total_time.

    K: итоговое число центров: оно растёт по ходу fit, поэтому значение
    является оценкой сверху.

    Raises:
        ZeroDivisionError: Если total_time равно нулю
    """
    if total_time == 0:
        raise ZeroDivisionError("Total time cannot be zero")
    return (N * K * D * n_iters) / total_time


def dpmeans_objective(
    X: np.ndarray,
    labels: np.ndarray,
    centers: np.ndarray,
    lam: float,
    layout: str = "points",
) -> float:
    """
    Целевая функция DP-means: сумма квадратов расстояний до своих центров + lam·K.

    Args:
        X: точки, (N, D) или (D, N) для layout="features"
        labels: метки 0..K-1
        centers: центры, (K, D) или (D, K) для layout="features"
        lam: штраф за кластер
        layout: "points" | "features"
    """
    if layout == "features":
        X = X.T
        centers = centers.T
    diff = np.asarray(X, dtype=np.float64) - centers[np.asarray(labels)]
    return float(np.einsum("nd,nd->", diff, diff) + lam * centers.shape[0])
