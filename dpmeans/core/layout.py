"""
Абстракция набора точек над физической раскладкой матрицы.

Алгоритм DP-means один; раскладка (points-major / features-major) влияет
только на ориентацию матричных операций. Центры хранятся в той же
ориентации, что и точки: (K, D) или (D, K).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence, Tuple

import numpy as np

from .cache import new_cache
from .config import Layout
from .distance import col_mins, linear_terms, nearest, row_mins
from .exceptions import InvalidShapeError


class PointSet(ABC):
    """Неизменяемый на время fit набор из N точек размерности D."""

    layout: Layout

    def __init__(self, data: np.ndarray) -> None:
        self.data = data
        self._sq_norms: np.ndarray | None = None

    @property
    @abstractmethod
    def n(self) -> int:
        """Число точек."""

    @property
    @abstractmethod
    def d(self) -> int:
        """Число признаков."""

    @abstractmethod
    def rows(self) -> np.ndarray:
        """Представление (N, D) без копирования, где это возможно."""

    @abstractmethod
    def point(self, i: int) -> np.ndarray:
        """Координаты точки i, (D,)."""

    @abstractmethod
    def take(self, indices: np.ndarray) -> "PointSet":
        """Подмножество точек в заданном порядке (копия)."""

    @abstractmethod
    def suffix_terms(self, i: int) -> np.ndarray:
        """Линеаризованные члены точек i..N-1 относительно центра в точке i."""

    @abstractmethod
    def initial_centers(self) -> np.ndarray:
        """Один центр: глобальное среднее."""

    @abstractmethod
    def n_centers(self, centers: np.ndarray) -> int:
        ...

    @abstractmethod
    def center_rows(self, centers: np.ndarray) -> np.ndarray:
        """Центры в виде (K, D)."""

    @abstractmethod
    def append_center(self, centers: np.ndarray, x: np.ndarray) -> np.ndarray:
        ...

    @abstractmethod
    def set_center_means(
        self, centers: np.ndarray, groups: Sequence[np.ndarray], labels: np.ndarray
    ) -> None:
        """Центр labels[j] := среднее точек groups[j] (на месте)."""

    @abstractmethod
    def keep_centers(self, centers: np.ndarray, keep: np.ndarray) -> np.ndarray:
        ...

    def sq_norms(self) -> np.ndarray:
        """||x_i||², считается один раз на набор."""
        if self._sq_norms is None:
            rows = self.rows()
            self._sq_norms = np.einsum("nd,nd->n", rows, rows)
        return self._sq_norms

    def linear_terms(self, centers: np.ndarray) -> np.ndarray:
        return linear_terms(self.data, centers, self.layout)

    def nearest_terms(self, centers: np.ndarray) -> np.ndarray:
        """Кэш (минимальный линеаризованный член, индекс центра) для всех точек."""
        terms = self.linear_terms(centers)
        if self.layout is Layout.POINTS_MAJOR:
            vals, idx = row_mins(terms)
        else:
            vals, idx = col_mins(terms)
        return new_cache(vals, idx)

    def nearest(self, centers: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Квадрат расстояния до ближайшего центра и его индекс."""
        return nearest(self.data, centers, self.layout)


class PointsMajor(PointSet):
    """Раскладка (N, D): строка i = точка i."""

    layout = Layout.POINTS_MAJOR

    @property
    def n(self) -> int:
        return self.data.shape[0]

    @property
    def d(self) -> int:
        return self.data.shape[1]

    def rows(self) -> np.ndarray:
        return self.data

    def point(self, i: int) -> np.ndarray:
        return self.data[i]

    def take(self, indices: np.ndarray) -> "PointsMajor":
        return PointsMajor(self.data[indices])

    def suffix_terms(self, i: int) -> np.ndarray:
        x = self.data[i]
        return -2.0 * (self.data[i:] @ x) + float(x @ x)

    def initial_centers(self) -> np.ndarray:
        return self.data.mean(axis=0, keepdims=True)

    def n_centers(self, centers: np.ndarray) -> int:
        return centers.shape[0]

    def center_rows(self, centers: np.ndarray) -> np.ndarray:
        return centers

    def append_center(self, centers: np.ndarray, x: np.ndarray) -> np.ndarray:
        return np.vstack([centers, x[None, :]])

    def set_center_means(
        self, centers: np.ndarray, groups: Sequence[np.ndarray], labels: np.ndarray
    ) -> None:
        for idx, lbl in zip(groups, labels):
            centers[lbl] = self.data[idx].mean(axis=0)

    def keep_centers(self, centers: np.ndarray, keep: np.ndarray) -> np.ndarray:
        return centers[keep]


class FeaturesMajor(PointSet):
    """Раскладка (D, N): столбец i = точка i."""

    layout = Layout.FEATURES_MAJOR

    @property
    def n(self) -> int:
        return self.data.shape[1]

    @property
    def d(self) -> int:
        return self.data.shape[0]

    def rows(self) -> np.ndarray:
        return self.data.T

    def point(self, i: int) -> np.ndarray:
        return self.data[:, i]

    def take(self, indices: np.ndarray) -> "FeaturesMajor":
        return FeaturesMajor(self.data[:, indices])

    def suffix_terms(self, i: int) -> np.ndarray:
        x = self.data[:, i]
        return -2.0 * (x @ self.data[:, i:]) + float(x @ x)

    def initial_centers(self) -> np.ndarray:
        return self.data.mean(axis=1, keepdims=True)

    def n_centers(self, centers: np.ndarray) -> int:
        return centers.shape[1]

    def center_rows(self, centers: np.ndarray) -> np.ndarray:
        return centers.T

    def append_center(self, centers: np.ndarray, x: np.ndarray) -> np.ndarray:
        return np.hstack([centers, x[:, None]])

    def set_center_means(
        self, centers: np.ndarray, groups: Sequence[np.ndarray], labels: np.ndarray
    ) -> None:
        for idx, lbl in zip(groups, labels):
            centers[:, lbl] = self.data[:, idx].mean(axis=1)

    def keep_centers(self, centers: np.ndarray, keep: np.ndarray) -> np.ndarray:
        return centers[:, keep]


_LAYOUTS: dict[Layout, type[PointSet]] = {
    Layout.POINTS_MAJOR: PointsMajor,
    Layout.FEATURES_MAJOR: FeaturesMajor,
}


def make_point_set(X: np.ndarray, layout: Layout | str = Layout.POINTS_MAJOR) -> PointSet:
    """
    Оборачивает матрицу точек в PointSet нужной раскладки.

    Raises:
        ValueError: неизвестная раскладка
        InvalidShapeError: массив не двумерный или N <= D
    """
    try:
        layout = Layout(layout)
    except ValueError as exc:
        raise ValueError(
            f"unknown layout {layout!r}; expected one of {[l.value for l in Layout]}"
        ) from exc

    data = np.asarray(X, dtype=np.float64)
    if data.ndim != 2:
        raise InvalidShapeError(f"points must be a 2-D matrix, got shape {data.shape}")

    points = _LAYOUTS[layout](data)
    if points.n <= points.d:
        raise InvalidShapeError(
            f"expected more points than features for layout={layout.value}: "
            f"got n={points.n}, d={points.d}"
        )
    return points
