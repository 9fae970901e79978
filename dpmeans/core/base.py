from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterator

import numpy as np

from dpmeans.metrics.timers import Timer

from .cache import pairwise_mins
from .collapse import collapse_small_clusters
from .config import OBJECTIVE_TOL, Layout
from .exceptions import NonConvergenceWarning, warn_external
from .grouping import group_indices
from .layout import PointSet, make_point_set


@dataclass(frozen=True, eq=False)
class DPMeansResult:
    """
    Результат fit.

    Распаковывается ровно в четыре значения:
        assignments, centers, objective, n_clusters = model.fit(X)

    n_iter и converged доступны только как атрибуты.
    """

    assignments: np.ndarray
    centers: np.ndarray
    objective: np.ndarray
    n_clusters: np.ndarray
    n_iter: int = 0
    converged: bool = False

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter((self.assignments, self.centers, self.objective, self.n_clusters))


@dataclass(frozen=True)
class IterationState:
    """Снимок внешней итерации для диагностического callback."""

    iteration: int
    objective: float
    n_clusters: int
    n_centers: int
    n_spawned: int


class DPMeansBase(ABC):
    """
    Базовый класс для реализаций DP-means.

    Отвечает за внешний цикл, последовательный проход по точкам с порождением
    новых кластеров, пересчёт центров, проверку сходимости и схлопывание.
    Реализации отличаются только пакетным шагом nearest_centers.

    Тайминги за один вызов fit(...):
    - T_batch: пакетный шаг (расстояния до текущих центров + argmin);
    - T_pass: последовательный проход, включая порождение кластеров;
    - T_update: пересчёт центров;
    - T_iter: сумма трёх предыдущих.
    """

    tol: float = OBJECTIVE_TOL

    def __init__(
        self,
        lam: float,
        n_iters: int = 100,
        shuffle: bool = True,
        collapse_threshold: float = 0,
        suppress_warning: bool = False,
        layout: Layout | str = Layout.POINTS_MAJOR,
        random_state: int | np.random.Generator | None = None,
        callback: Callable[[IterationState], None] | None = None,
        logger: Any | None = None,
    ):
        if not lam > 0:
            raise ValueError(f"lam must be positive, got {lam}")
        if n_iters < 1:
            raise ValueError(f"n_iters must be >= 1, got {n_iters}")
        if collapse_threshold < 0:
            raise ValueError(
                f"collapse_threshold must be non-negative, got {collapse_threshold}"
            )

        self.lam = float(lam)
        self.n_iters = int(n_iters)
        self.shuffle = shuffle
        self.collapse_threshold = collapse_threshold
        self.suppress_warning = suppress_warning
        self.layout = Layout(layout)
        self.random_state = random_state
        self.callback = callback
        self.logger = logger

        self.centers: np.ndarray | None = None
        self.labels: np.ndarray | None = None
        self.objective: np.ndarray | None = None
        self.n_clusters: np.ndarray | None = None
        self.converged: bool = False

        self.t_batch_total: float = 0.0
        self.t_pass_total: float = 0.0
        self.t_update_total: float = 0.0
        self.t_iter_total: float = 0.0

        self.n_iters_actual: int = 0

    @property
    def n_workers(self) -> int:
        """Число параллельных исполнителей пакетного шага (для эффективности)."""
        return 1

    def _permutation(self, n: int) -> np.ndarray:
        rng = np.random.default_rng(self.random_state)
        return rng.permutation(n)

    def fit(self, X: np.ndarray) -> DPMeansResult:
        """
        Основной цикл DP-means.

        Каждая внешняя итерация:
        1. пакетно находит ближайший существующий центр для всех точек;
        2. последовательно обходит точки: если квадрат расстояния > lam,
           точка становится новым центром, и кэш минимумов ещё не посещённых
           точек обновляется только относительно этого центра;
        3. пересчитывает центры как средние назначенных точек.

        Остановка: |obj[t] - obj[t-1]| < tol * obj[t], либо n_iters итераций
        (тогда NonConvergenceWarning, если не подавлено).

        Returns:
            DPMeansResult; метки возвращаются в исходном порядке точек
        """
        points = make_point_set(X, self.layout)
        n = points.n

        order: np.ndarray | None = None
        if self.shuffle:
            order = self._permutation(n)
            points = points.take(order)

        centers = points.initial_centers()
        k = 1
        x_sq = points.sq_norms()
        Z = np.empty(n, dtype=np.int64)

        objective = np.zeros(self.n_iters, dtype=np.float64)
        n_clusters = np.zeros(self.n_iters, dtype=np.int64)

        t_batch = Timer()
        t_pass = Timer()
        t_update = Timer()
        self.n_iters_actual = 0
        self.converged = False

        for i in range(self.n_iters):
            with t_batch:
                cache = self.nearest_centers(points, centers)

            with t_pass:
                values = cache["value"]
                owners = cache["owner"]
                obj = 0.0
                n_spawned = 0
                for nn in range(n):
                    dist = x_sq[nn] + values[nn]
                    if dist > self.lam:
                        k += 1
                        n_spawned += 1
                        centers = points.append_center(centers, points.point(nn))
                        suffix = cache[nn:]
                        pairwise_mins(suffix, points.suffix_terms(nn), k - 1, out=suffix)
                        dist = 0.0
                    Z[nn] = owners[nn]
                    obj += dist
                obj += self.lam * k

            with t_update:
                groups, live = group_indices(Z)
                points.set_center_means(centers, groups, live)

            objective[i] = obj
            n_clusters[i] = live.size

            self.t_batch_total = t_batch.total
            self.t_pass_total = t_pass.total
            self.t_update_total = t_update.total
            self.t_iter_total = t_batch.total + t_pass.total + t_update.total
            self.n_iters_actual = i + 1

            converged = i > 0 and abs(obj - objective[i - 1]) < self.tol * obj

            if self.callback is not None:
                self.callback(
                    IterationState(
                        iteration=i + 1,
                        objective=obj,
                        n_clusters=int(live.size),
                        n_centers=k,
                        n_spawned=n_spawned,
                    )
                )

            if self.logger and (i == 0 or (i + 1) % 10 == 0 or converged):
                status = " (converged)" if converged else ""
                self.logger.info(
                    f"  Iteration {i + 1}/{self.n_iters}{status} "
                    f"(objective={obj:.6g}, clusters={live.size}, spawned={n_spawned}, "
                    f"T_batch={t_batch.elapsed:.6f}s, T_pass={t_pass.elapsed:.6f}s, "
                    f"T_update={t_update.elapsed:.6f}s)"
                )

            if converged:
                self.converged = True
                if self.logger:
                    self.logger.info(
                        f"  Convergence reached after {i + 1} iterations "
                        f"(objective={obj:.6g}, tol={self.tol:.0e})"
                    )
                break

        objective = objective[: self.n_iters_actual]
        n_clusters = n_clusters[: self.n_iters_actual]

        if not self.converged:
            if not self.suppress_warning:
                warn_external(
                    f"DP-means did not converge in {self.n_iters} iterations",
                    NonConvergenceWarning,
                )
            if self.logger:
                self.logger.warning(
                    f"  DP-means did not converge in {self.n_iters} iterations"
                )

        Z, centers = collapse_small_clusters(
            points,
            centers,
            Z,
            self.collapse_threshold,
            suppress_warning=self.suppress_warning,
            logger=self.logger,
        )

        if order is not None:
            Z = Z[np.argsort(order)]

        self.labels = Z
        self.centers = centers
        self.objective = objective
        self.n_clusters = n_clusters

        return DPMeansResult(
            assignments=Z,
            centers=centers,
            objective=objective,
            n_clusters=n_clusters,
            n_iter=self.n_iters_actual,
            converged=self.converged,
        )

    @abstractmethod
    def nearest_centers(self, points: PointSet, centers: np.ndarray) -> np.ndarray:
        """
        Пакетный шаг: кэш (минимальный линеаризованный член, индекс центра)
        для всех точек относительно текущих центров.
        """
        raise NotImplementedError
