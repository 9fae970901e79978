"""
Загрузка датасетов для DP-means.

Поддерживаются текстовые файлы, созданные save_dataset, и .npy-матрицы
(N, D) без истинных меток.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import numpy as np


class Dataset:
    """
    Представление датасета: точки X (N, D), истинные метки (если есть)
    и метаданные.
    """

    def __init__(self, data_path: str | Path) -> None:
        self.data_path: Path | None = Path(data_path)
        self.X: np.ndarray | None = None
        self.labels_true: np.ndarray | None = None
        self.metadata: dict[str, Any] = {}

        logging.getLogger("dpmeans").info(f"Loading dataset from {self.data_path}")
        if self.data_path.suffix == ".npy":
            self._load_npy()
        else:
            self._load_text()

        self.metadata.setdefault("N", int(self.X.shape[0]))
        self.metadata.setdefault("D", int(self.X.shape[1]))

    @classmethod
    def from_arrays(
        cls,
        X: np.ndarray,
        labels_true: np.ndarray | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> "Dataset":
        """Датасет из уже загруженных массивов (например, из generate_blobs)."""
        dataset = cls.__new__(cls)
        dataset.data_path = None
        dataset.X = np.asarray(X, dtype=np.float64)
        dataset.labels_true = labels_true
        dataset.metadata = dict(metadata or {})
        dataset.metadata.setdefault("N", int(dataset.X.shape[0]))
        dataset.metadata.setdefault("D", int(dataset.X.shape[1]))
        return dataset

    @property
    def dataset_info(self) -> dict[str, Any]:
        return self.metadata

    def _load_npy(self) -> None:
        X = np.load(self.data_path)
        if X.ndim != 2:
            raise ValueError(f"Expected a 2-D array in {self.data_path}, got {X.shape}")
        self.X = X.astype(np.float64, copy=False)

    def _load_text(self) -> None:
        """
        Формат файла:
        - строки с ``#``: комментарии; первая из них может содержать JSON
          с метаданными;
        - остальные строки: метка + координаты.
        """
        points: list[np.ndarray] = []
        labels: list[int] = []

        with open(self.data_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                if line.startswith("#"):
                    if not self.metadata:
                        payload = line.lstrip("#").strip()
                        if payload.startswith("{"):
                            self.metadata = json.loads(payload)
                    continue

                parts = line.split()
                labels.append(int(parts[0]))
                points.append(np.array(parts[1:], dtype=np.float64))

        if not points:
            raise ValueError(f"No data points found in {self.data_path}")

        self.X = np.vstack(points)
        self.labels_true = np.array(labels, dtype=np.int64)

        logging.getLogger("dpmeans").info(f"Dataset loaded: X.shape={self.X.shape}")
