from __future__ import annotations

from dataclasses import dataclass
from multiprocessing import Pool, RawArray, cpu_count
from typing import Any, List, Optional, Tuple

import numpy as np

from dpmeans.core.base import DPMeansBase
from dpmeans.core.cache import MIN_ENTRY_DTYPE
from dpmeans.core.distance import row_mins
from dpmeans.core.layout import PointSet


@dataclass(frozen=True)
class MultiprocessingConfig:
    """Параметры многопроцессорного пакетного шага."""

    n_processes: int = 4
    chunk_size: Optional[int] = None


# --- Глобальное состояние: shared X (N, D) в воркерах ---
_SHARED_X_BUF: RawArray | None = None
_SHARED_X_SHAPE: Tuple[int, int] | None = None


def _init_shared_X(raw: RawArray, shape: Tuple[int, int]) -> None:
    """Инициализатор пула: регистрирует shared X."""
    global _SHARED_X_BUF, _SHARED_X_SHAPE
    _SHARED_X_BUF = raw
    _SHARED_X_SHAPE = shape


def _get_shared_X() -> np.ndarray:
    """NumPy-представление shared X."""
    assert _SHARED_X_BUF is not None and _SHARED_X_SHAPE is not None
    arr = np.frombuffer(_SHARED_X_BUF, dtype=np.float64)
    return arr.reshape(_SHARED_X_SHAPE)


def _nearest_chunk_worker(
    args: Tuple[int, int, np.ndarray]
) -> Tuple[np.ndarray, np.ndarray]:
    """Линеаризованные члены и построчный argmin для строк [start, stop)."""
    start, stop, centers = args
    X_chunk = _get_shared_X()[start:stop]
    c_sq = np.sum(centers * centers, axis=1)
    terms = X_chunk @ centers.T  # (m, K)
    terms *= -2.0
    terms += c_sq[None, :]
    return row_mins(terms)


class DPMeansCPUMultiprocessing(DPMeansBase):
    """
    DP-means с пакетным шагом, разбитым по чанкам строк между процессами.

    Последовательный проход по точкам остаётся в родительском процессе:
    кластер, порождённый в точке i, влияет на ещё не посещённые точки.
    """

    def __init__(
        self,
        lam: float,
        n_iters: int = 100,
        mp: MultiprocessingConfig = MultiprocessingConfig(),
        **kwargs: Any,
    ) -> None:
        super().__init__(lam=lam, n_iters=n_iters, **kwargs)
        self.mp = mp

        # Пул и чанки переиспользуются в рамках fit
        self._pool: Optional[Pool] = None
        self._chunks: Optional[List[Tuple[int, int]]] = None

    @property
    def n_workers(self) -> int:
        return max(1, min(int(self.mp.n_processes), cpu_count()))

    # --- Пул и разбиение ---

    def _make_chunks(self, N: int, n_procs: int) -> List[Tuple[int, int]]:
        """Разбиение [0, N) на непрерывные диапазоны."""
        if self.mp.chunk_size is None:
            bounds = np.linspace(0, N, n_procs + 1).astype(int)
            chunks = list(zip(bounds[:-1].tolist(), bounds[1:].tolist()))
        else:
            cs = int(self.mp.chunk_size)
            if cs <= 0:
                raise ValueError("chunk_size must be positive")
            chunks = [(i, min(i + cs, N)) for i in range(0, N, cs)]
        return [(a, b) for a, b in chunks if b > a]

    def _ensure_pool_and_chunks(self, points: PointSet) -> None:
        """Ленивая инициализация пула, shared X и чанков."""
        if self._pool is not None and self._chunks is not None:
            return

        n_procs = self.n_workers
        N = points.n

        self._chunks = self._make_chunks(N, n_procs)

        # Копируем точки один раз в shared RawArray (float64, строки = точки)
        X_c = np.ascontiguousarray(points.rows(), dtype=np.float64)
        raw = RawArray("d", int(X_c.size))
        shared_view = np.frombuffer(raw, dtype=np.float64).reshape(X_c.shape)
        shared_view[:] = X_c

        self._pool = Pool(
            processes=n_procs,
            initializer=_init_shared_X,
            initargs=(raw, X_c.shape),
        )

    def _close_pool(self) -> None:
        """Закрыть пул после fit."""
        if self._pool is not None:
            self._pool.close()
            self._pool.join()
        self._pool = None
        self._chunks = None

    # ---------- Batched step (parallel over chunks) ----------

    def nearest_centers(self, points: PointSet, centers: np.ndarray) -> np.ndarray:
        self._ensure_pool_and_chunks(points)
        assert self._pool is not None and self._chunks is not None

        C = np.ascontiguousarray(points.center_rows(centers), dtype=np.float64)
        args: List[Tuple[int, int, np.ndarray]] = [
            (start, stop, C) for start, stop in self._chunks
        ]
        results = self._pool.map(_nearest_chunk_worker, args)

        cache = np.empty(points.n, dtype=MIN_ENTRY_DTYPE)
        for (start, stop), (vals, idx) in zip(self._chunks, results):
            cache["value"][start:stop] = vals
            cache["owner"][start:stop] = idx
        return cache

    def fit(self, X: np.ndarray):
        """fit с переиспользованием пула и гарантированным закрытием."""
        try:
            return super().fit(X)
        finally:
            self._close_pool()
