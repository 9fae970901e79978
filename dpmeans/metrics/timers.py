"""
Таймер на основе time.perf_counter() для замеров фаз fit.

Один экземпляр можно использовать многократно: elapsed хранит длительность
последнего замера, total и laps накапливаются между входами.
"""
from __future__ import annotations
import time
from typing import Any


class Timer:
    """
    Контекстный менеджер для измерения времени выполнения кода.

    Пример использования:
        t = Timer()
        for _ in range(3):
            with t:
                ...
        t.elapsed  # последний замер
        t.total    # сумма всех замеров
    """

    def __init__(self) -> None:
        self.start: float = 0.0
        self.end: float = 0.0
        self.elapsed: float = 0.0
        self.total: float = 0.0
        self.laps: int = 0

    def reset(self) -> None:
        """Обнуляет накопленные значения."""
        self.start = self.end = self.elapsed = self.total = 0.0
        self.laps = 0

    def __enter__(self) -> Timer:
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.end = time.perf_counter()
        self.elapsed = self.end - self.start
        self.total += self.elapsed
        self.laps += 1

    def __repr__(self) -> str:
        return f"Timer(elapsed={self.elapsed:.6f}, total={self.total:.6f}, laps={self.laps})"
