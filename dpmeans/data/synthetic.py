"""
Генератор синтетических датасетов для DP-means.

Использует sklearn.make_blobs и сохраняет данные в текстовом формате,
который читает Dataset.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
from sklearn.datasets import make_blobs
from sklearn.preprocessing import StandardScaler


@dataclass
class GeneratedDataset:
    """Контейнер для сгенерированных данных."""

    data: np.ndarray
    labels: np.ndarray
    centers: np.ndarray
    metadata: dict[str, Any]


def generate_blobs(
    N: int,
    D: int,
    K: int,
    cluster_std: float = 1.0,
    seed: int = 42,
    standardize: bool = True,
) -> GeneratedDataset:
    """
    Генерация синтетического датасета с помощью make_blobs.

    Args:
        N: Количество точек
        D: Размерность пространства
        K: Количество кластеров
        cluster_std: Стандартное отклонение кластеров
        seed: seed для воспроизводимости
        standardize: нормализовать признаки StandardScaler

    Returns:
        GeneratedDataset с data (N x D), labels (N,), centers (K x D)
    """
    if N <= D:
        raise ValueError(f"N must be greater than D, got N={N}, D={D}")

    data, labels, centers = make_blobs(
        n_samples=N,
        n_features=D,
        centers=K,
        cluster_std=cluster_std,
        center_box=(-10.0, 10.0),
        random_state=seed,
        return_centers=True,
    )

    if standardize:
        scaler = StandardScaler()
        data = scaler.fit_transform(data)
        centers = scaler.transform(centers)

    metadata = {
        "N": N,
        "D": D,
        "K": K,
        "cluster_std": cluster_std,
        "seed": seed,
        "standardized": standardize,
    }
    return GeneratedDataset(
        data=data.astype(np.float64),
        labels=labels.astype(np.int64),
        centers=centers.astype(np.float64),
        metadata=metadata,
    )


def save_dataset(dataset: GeneratedDataset, path: str | Path) -> Path:
    """
    Сохраняет датасет в текстовый формат:
    - первая строка: ``# `` + JSON с метаданными;
    - далее N строк: метка + координаты.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write("# " + json.dumps(dataset.metadata, ensure_ascii=False) + "\n")
        for label, row in zip(dataset.labels, dataset.data):
            coords = " ".join(f"{v:.10g}" for v in row)
            f.write(f"{int(label)} {coords}\n")
    return path
