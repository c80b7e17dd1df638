"""Tests for the bounded fetch pool."""

import threading
import time

import pytest

from app.core.worker import BoundedPool


class TestBoundedPool:
    def test_results_keep_input_order(self):
        def slow_identity(value: int) -> int:
            time.sleep(0.01 * (5 - value))
            return value

        assert BoundedPool(4).map_ordered(slow_identity, [0, 1, 2, 3, 4]) == [0, 1, 2, 3, 4]

    def test_empty_input(self):
        assert BoundedPool(2).map_ordered(lambda x: x, []) == []

    def test_first_failure_is_raised_and_pending_jobs_cancelled(self):
        started = []
        lock = threading.Lock()

        def job(value: int) -> int:
            with lock:
                started.append(value)
            if value == 0:
                raise RuntimeError("boom")
            time.sleep(0.05)
            return value

        with pytest.raises(RuntimeError, match="boom"):
            BoundedPool(1).map_ordered(job, list(range(10)))

        assert started[0] == 0
        assert len(started) <= 2

    def test_worker_count_is_bounded(self):
        active = 0
        peak = 0
        lock = threading.Lock()

        def job(value: int) -> int:
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.02)
            with lock:
                active -= 1
            return value

        BoundedPool(2).map_ordered(job, list(range(8)))

        assert peak <= 2
