# core/cpu_numpy.py
from __future__ import annotations

import numpy as np

from .base import DPMeansBase
from .layout import PointSet


class DPMeansCPUNumpy(DPMeansBase):
    """Однопоточная реализация DP-means на NumPy (baseline)."""

    def nearest_centers(self, points: PointSet, centers: np.ndarray) -> np.ndarray:
        # (N, K) или (K, N) в родной ориентации раскладки → argmin по центрам
        return points.nearest_terms(centers)
