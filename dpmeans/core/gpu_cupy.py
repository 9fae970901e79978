"""
CUDA/CuPy реализация пакетного шага DP-means.

На GPU выполняется только пакетный шаг внешней итерации (GEMM + argmin
по центрам): точки загружаются на устройство один раз за fit, центры
на каждой итерации (их число растёт). Последовательный проход с порождением
кластеров остаётся на CPU.
"""

from __future__ import annotations

from typing import Any

try:  # CuPy опционален: можем работать без GPU
    import cupy as cp

    _GPU_OK = True
except Exception:  # noqa: BLE001
    cp = None  # type: ignore
    _GPU_OK = False

import numpy as np

from dpmeans.core.base import DPMeansBase, DPMeansResult
from dpmeans.core.cache import new_cache
from dpmeans.core.layout import PointSet
from dpmeans.metrics.timers import Timer


def gpu_available() -> bool:
    """Проверка доступности CuPy/CUDA."""
    return _GPU_OK


class DPMeansGPUCuPy(DPMeansBase):
    """
    GPU вариант пакетного шага.

    - Формула ||x-c||² = ||x||² + ||c||² - 2x·c, без материализации (N, K, D);
      ||x||² на GPU не нужен: он добавляется поточечно на CPU.
    - Non-blocking CUDA stream, синхронизация только перед копированием на CPU.
    - t_h2d / t_d2h: суммарное время передач за fit.
    """

    def __init__(self, lam: float, n_iters: int = 100, **kwargs: Any) -> None:
        if not _GPU_OK:
            raise RuntimeError("CuPy/CUDA недоступен, GPU DP-means выключен")
        super().__init__(lam=lam, n_iters=n_iters, **kwargs)
        self.t_h2d: float = 0.0  # Время передачи Host->Device
        self.t_d2h: float = 0.0  # Время передачи Device->Host
        self._stream: "cp.cuda.Stream" = cp.cuda.Stream(non_blocking=True)
        self._X_gpu: "cp.ndarray | None" = None
        self._h2d = Timer()
        self._d2h = Timer()

    def _ensure_points(self, points: PointSet) -> "cp.ndarray":
        """Точки (N, D) на устройстве; загружаются один раз за fit."""
        if self._X_gpu is None or self._X_gpu.shape[0] != points.n:
            with self._h2d:
                with self._stream:
                    self._X_gpu = cp.asarray(points.rows(), dtype=cp.float64, order="C")
                self._stream.synchronize()
        return self._X_gpu

    def nearest_centers(self, points: PointSet, centers: np.ndarray) -> np.ndarray:
        X_gpu = self._ensure_points(points)
        with self._h2d:
            with self._stream:
                C = cp.asarray(points.center_rows(centers), dtype=cp.float64, order="C")

        with self._stream:
            c_sq = cp.sum(C * C, axis=1)  # (K,)
            terms = -2.0 * (X_gpu @ C.T) + c_sq[None, :]  # (N, K) через cuBLAS
            idx = cp.argmin(terms, axis=1)
            vals = cp.take_along_axis(terms, idx[:, None], axis=1)[:, 0]

        with self._d2h:
            self._stream.synchronize()
            vals_cpu = cp.asnumpy(vals)
            idx_cpu = cp.asnumpy(idx).astype(np.int64, copy=False)

        self.t_h2d = self._h2d.total
        self.t_d2h = self._d2h.total
        return new_cache(vals_cpu, idx_cpu)

    def fit(self, X: np.ndarray) -> DPMeansResult:
        # сбрасываем данные устройства и таймеры передач на новый запуск
        self._X_gpu = None
        self._h2d.reset()
        self._d2h.reset()
        self.t_h2d = 0.0
        self.t_d2h = 0.0
        try:
            return super().fit(X)
        finally:
            self._X_gpu = None
