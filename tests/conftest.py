"""
Общие фикстуры для всех тестов.
"""

import numpy as np
import pytest


@pytest.fixture
def small_dataset():
    """Два явно разделённых кластера в 2D (60 точек)."""
    np.random.seed(42)
    cluster1 = np.random.randn(30, 2) * 0.5 + [0, 0]
    cluster2 = np.random.randn(30, 2) * 0.5 + [8, 8]
    return np.vstack([cluster1, cluster2])


@pytest.fixture
def medium_dataset():
    """Три кластера в 10D (150 точек)."""
    np.random.seed(42)
    cluster1 = np.random.randn(50, 10) * 0.5 + [0] * 10
    cluster2 = np.random.randn(50, 10) * 0.5 + [5] * 10
    cluster3 = np.random.randn(50, 10) * 0.5 + [-5] * 10
    return np.vstack([cluster1, cluster2, cluster3])


@pytest.fixture
def two_pairs():
    """
    Две плотные пары далеко друг от друга.

    Квадрат расстояния внутри пары 0.01, между парами >= 100,
    от глобального среднего до любой точки ~25.
    """
    return np.array([
        [0.0, 0.0],
        [0.0, 0.1],
        [10.0, 0.0],
        [10.0, 0.1],
    ])


@pytest.fixture
def uneven_clusters():
    """Кластеры из 5 и 3 точек, далеко друг от друга."""
    return np.array([
        [0.0, 0.0],
        [0.1, 0.0],
        [0.0, 0.1],
        [0.1, 0.1],
        [0.05, 0.05],
        [20.0, 20.0],
        [20.1, 20.0],
        [20.0, 20.1],
    ])
