from __future__ import annotations

from typing import List, Tuple

import numpy as np


def group_indices(labels: np.ndarray) -> Tuple[List[np.ndarray], np.ndarray]:
    """
    Группирует индексы точек по меткам за один проход.

    Метки могут быть разреженными (после схлопывания часть меток исчезает).

    Args:
        labels: вектор целых меток длины N

    Returns:
        Кортеж (groups, unique_labels):
        - groups: для каждой метки в порядке первого появления: индексы её точек
          (по возрастанию)
        - unique_labels: сами метки в том же порядке
    """
    labels = np.asarray(labels)
    if labels.ndim != 1:
        raise ValueError(f"labels must be 1-D, got shape {labels.shape}")

    slots: dict[int, int] = {}
    members: List[List[int]] = []
    for i, lbl in enumerate(labels.tolist()):
        slot = slots.get(lbl)
        if slot is None:
            slot = len(members)
            slots[lbl] = slot
            members.append([])
        members[slot].append(i)

    groups = [np.asarray(m, dtype=np.int64) for m in members]
    unique_labels = np.fromiter(slots.keys(), dtype=np.int64, count=len(slots))
    return groups, unique_labels


def group_counts(labels: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Размеры групп и метки в порядке первого появления."""
    groups, unique_labels = group_indices(labels)
    counts = np.fromiter((g.size for g in groups), dtype=np.int64, count=len(groups))
    return counts, unique_labels

