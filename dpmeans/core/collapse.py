"""
Схлопывание мелких кластеров после сходимости.

Порядок:
1. Центры без единой точки (как правило, стартовый центр-среднее) удаляются
   безусловно.
2. Кластеры размером строго меньше порога удаляются, их точки переназначаются
   ближайшему выжившему центру.
3. Если порог удалил бы все кластеры, он ослабляется (x COLLAPSE_DAMPING)
   до тех пор, пока хотя бы один кластер не выживет.

Метки после схлопывания перенумерованы в 0..K'-1 в порядке центров.
Трассы целевой функции и числа кластеров не пересчитываются.
"""

from __future__ import annotations

from typing import Any, Tuple

import numpy as np

from .config import COLLAPSE_DAMPING
from .exceptions import DegenerateCollapseWarning, warn_external
from .grouping import group_counts
from .layout import PointSet


def _relabel(labels: np.ndarray, keep: np.ndarray) -> np.ndarray:
    """Перенумерация меток выживших центров; удалённые получают -1."""
    remap = np.full(keep.shape[0], -1, dtype=np.int64)
    remap[keep] = np.arange(int(keep.sum()), dtype=np.int64)
    return remap[labels]


def collapse_small_clusters(
    points: PointSet,
    centers: np.ndarray,
    labels: np.ndarray,
    threshold: float,
    suppress_warning: bool = False,
    logger: Any | None = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Удаляет пустые и слишком мелкие кластеры.

    Args:
        points: точки в той раскладке, в которой шёл fit
        centers: центры в той же раскладке
        labels: метки 0..K-1, индексы центров
        threshold: минимальный размер кластера; <= 0: ничего не делать
        suppress_warning: не выдавать DegenerateCollapseWarning
        logger: логгер (опционально)

    Returns:
        Кортеж (labels, centers) после схлопывания
    """
    if logger:
        logger.info(f"  Collapse threshold is {threshold}")
    if threshold <= 0:
        return labels, centers

    k = points.n_centers(centers)
    counts, live = group_counts(labels)

    occupied = np.zeros(k, dtype=bool)
    occupied[live] = True
    if not occupied.all():
        if logger:
            logger.info(
                f"  Pruning empty cluster(s) {np.flatnonzero(~occupied).tolist()}"
            )
        centers = points.keep_centers(centers, occupied)
        labels = _relabel(labels, occupied)
    else:
        labels = labels.copy()

    # размеры в порядке центров: после удаления пустых метки идут подряд
    counts = counts[np.argsort(live, kind="stable")]

    bad = counts < threshold
    if bad.all():
        msg = (
            f"collapse threshold {threshold} would remove all {counts.size} clusters "
            f"(largest has {int(counts.max())} points); relaxing threshold"
        )
        if not suppress_warning:
            warn_external(msg, DegenerateCollapseWarning)
        if logger:
            logger.warning(f"  {msg}")
        while bad.all():
            threshold *= COLLAPSE_DAMPING
            bad = counts < threshold
        if logger:
            logger.info(f"  Relaxed collapse threshold to {threshold:.4g}")

    if bad.any():
        if logger:
            logger.info(
                f"  Collapsing cluster(s) {np.flatnonzero(bad).tolist()} "
                f"with < {threshold:.4g} points"
            )
        orphans = np.flatnonzero(bad[labels])
        survivors = ~bad
        centers = points.keep_centers(centers, survivors)
        labels = _relabel(labels, survivors)
        _, owner = points.take(orphans).nearest(centers)
        labels[orphans] = owner

    return labels, centers
