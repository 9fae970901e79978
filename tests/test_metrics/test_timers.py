"""
Тесты таймеров для измерения фаз fit.
"""

import time

import pytest

from dpmeans.metrics.timers import Timer


class TestTimer:
    """Тесты контекстного менеджера Timer."""

    def test_timer_basic(self):
        with Timer() as t:
            time.sleep(0.05)

        assert t.elapsed >= 0.05
        assert t.end > t.start
        assert abs(t.elapsed - (t.end - t.start)) < 1e-6
        assert t.total == t.elapsed
        assert t.laps == 1

    def test_timer_accumulates(self):
        """Повторное использование: elapsed — последний замер, total — сумма."""
        timer = Timer()

        with timer:
            time.sleep(0.02)
        first = timer.elapsed

        with timer:
            time.sleep(0.02)

        assert timer.laps == 2
        assert timer.total == pytest.approx(first + timer.elapsed)
        assert timer.total >= 0.04

    def test_timer_reset(self):
        timer = Timer()
        with timer:
            pass

        timer.reset()

        assert timer.total == 0.0
        assert timer.elapsed == 0.0
        assert timer.laps == 0

    def test_timer_nested(self):
        with Timer() as outer:
            time.sleep(0.03)
            with Timer() as inner:
                time.sleep(0.02)

        assert outer.elapsed > inner.elapsed
        assert outer.elapsed >= 0.05

    def test_timer_repr(self):
        assert "laps=0" in repr(Timer())
