"""
Кэш минимального линеаризованного расстояния до существующих центров.

Кэш хранится как массив структур (value, owner): одна запись на точку.
Его владелец — текущий проход fit; при появлении нового кластера суффикс
кэша (ещё не посещённые точки) обновляется на месте через pairwise_mins.
"""

from __future__ import annotations

import numpy as np

from .exceptions import DimensionMismatch

MIN_ENTRY_DTYPE = np.dtype([("value", np.float64), ("owner", np.int64)])


def new_cache(values: np.ndarray, owners: np.ndarray) -> np.ndarray:
    """Собирает кэш из параллельных векторов минимумов и индексов центров."""
    values = np.asarray(values)
    owners = np.asarray(owners)
    if values.shape != owners.shape or values.ndim != 1:
        raise DimensionMismatch(
            f"values and owners must be 1-D of equal length, "
            f"got {values.shape} and {owners.shape}"
        )
    entries = np.empty(values.shape[0], dtype=MIN_ENTRY_DTYPE)
    entries["value"] = values
    entries["owner"] = owners
    return entries


def pairwise_mins(
    entries: np.ndarray,
    candidates: np.ndarray,
    owner: int,
    out: np.ndarray | None = None,
) -> np.ndarray:
    """
    Поэлементный минимум кэша и новых кандидатов.

    Там, где кандидат строго меньше, записывается его значение и индекс owner;
    при равенстве остаётся исходная запись.

    Args:
        entries: кэш (MIN_ENTRY_DTYPE), длина m
        candidates: значения для нового центра, длина m
        owner: индекс центра-кандидата
        out: куда писать результат; out=entries обновляет кэш на месте
            (в т.ч. срез-представление суффикса)

    Returns:
        out, либо новый массив, если out не задан
    """
    candidates = np.asarray(candidates, dtype=np.float64)
    if candidates.shape != entries.shape:
        raise DimensionMismatch(
            f"cache has {entries.shape[0]} entries, got {candidates.shape[0]} candidates"
        )
    if out is None:
        out = entries.copy()
    elif out is not entries:
        out[...] = entries

    wins = out["value"] > candidates
    out["value"][wins] = candidates[wins]
    out["owner"][wins] = owner
    return out
