"""
Функциональная точка входа DP-means.

    result = fit(X, lam=4.0, random_state=0)
    Z, centers, objective, n_clusters = result
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable

import numpy as np

from dpmeans.core.base import DPMeansBase, DPMeansResult, IterationState
from dpmeans.core.config import Layout
from dpmeans.core.cpu_multiprocessing import (
    DPMeansCPUMultiprocessing,
    MultiprocessingConfig,
)
from dpmeans.core.cpu_numpy import DPMeansCPUNumpy
from dpmeans.core.gpu_cupy import DPMeansGPUCuPy


class Backend(str, Enum):
    NUMPY = "numpy"
    MULTIPROCESSING = "multiprocessing"
    GPU = "gpu"


def make_model(
    lam: float,
    backend: Backend | str = Backend.NUMPY,
    n_processes: int | None = None,
    **kwargs: Any,
) -> DPMeansBase:
    """
    Создаёт модель DP-means для выбранного бэкенда пакетного шага.

    Args:
        lam: порог квадрата расстояния / штраф за кластер
        backend: numpy | multiprocessing | gpu
        n_processes: число процессов (только для multiprocessing)
        **kwargs: остальные параметры DPMeansBase

    Raises:
        ValueError: неизвестный бэкенд
        RuntimeError: gpu запрошен без CuPy/CUDA
    """
    try:
        backend = Backend(backend)
    except ValueError as exc:
        raise ValueError(
            f"unknown backend {backend!r}; expected one of {[b.value for b in Backend]}"
        ) from exc

    if backend is Backend.MULTIPROCESSING:
        mp = (
            MultiprocessingConfig(n_processes=n_processes)
            if n_processes is not None
            else MultiprocessingConfig()
        )
        return DPMeansCPUMultiprocessing(lam=lam, mp=mp, **kwargs)
    if backend is Backend.GPU:
        return DPMeansGPUCuPy(lam=lam, **kwargs)
    return DPMeansCPUNumpy(lam=lam, **kwargs)


def fit(
    points: np.ndarray,
    lam: float,
    max_iter: int = 100,
    shuffle: bool = True,
    collapse_threshold: float = 0,
    suppress_warning: bool = False,
    layout: Layout | str = Layout.POINTS_MAJOR,
    random_state: int | np.random.Generator | None = None,
    backend: Backend | str = Backend.NUMPY,
    callback: Callable[[IterationState], None] | None = None,
    logger: Any | None = None,
) -> DPMeansResult:
    """
    Кластеризация DP-means.

    Args:
        points: (N, D) для layout="points" или (D, N) для layout="features"; N > D
        lam: порог квадрата расстояния, за которым точка порождает кластер
        max_iter: максимум внешних итераций
        shuffle: перемешать точки перед fit (метки возвращаются в исходном порядке)
        collapse_threshold: минимальный размер кластера после сходимости; 0 = выкл.
        suppress_warning: подавить NonConvergenceWarning / DegenerateCollapseWarning
        layout: раскладка points и возвращаемых centers
        random_state: seed или np.random.Generator для перестановки
        backend: реализация пакетного шага
        callback: вызывается после каждой внешней итерации с IterationState
        logger: логгер прогресса

    Returns:
        DPMeansResult; распаковывается в (assignments, centers, objective, n_clusters),
        n_iter и converged доступны как атрибуты
    """
    model = make_model(
        lam,
        backend=backend,
        n_iters=max_iter,
        shuffle=shuffle,
        collapse_threshold=collapse_threshold,
        suppress_warning=suppress_warning,
        layout=layout,
        random_state=random_state,
        callback=callback,
        logger=logger,
    )
    return model.fit(points)
