"""
Unit tests for the worker pool.
"""

import logging
import threading

import pytest

from webserver.core.thread_pool import ThreadPool


class TestThreadPool:
    """Tests for ThreadPool class."""

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            ThreadPool(workers=0)

    def test_submit_before_start(self):
        with pytest.raises(RuntimeError):
            ThreadPool(workers=1).submit(print)

    def test_runs_all_tasks(self):
        pool = ThreadPool(workers=3)
        pool.start()
        results = []
        lock = threading.Lock()

        def work(n):
            with lock:
                results.append(n)

        for n in range(50):
            pool.submit(work, args=(n,))
        pool.shutdown(wait=True, timeout=5.0)

        assert sorted(results) == list(range(50))

    def test_fixed_number_of_workers(self):
        pool = ThreadPool(workers=4)
        pool.start()
        pool.start()  # No-op

        assert pool.stats["workers"]["total"] == 4
        pool.shutdown()

    def test_shutdown_logs_task_counts(self, caplog):
        pool = ThreadPool(workers=2)
        pool.start()

        def boom():
            raise RuntimeError("task failed")

        pool.submit(boom)
        pool.submit(print, args=("ok",))

        with caplog.at_level(logging.INFO, logger="webserver"):
            pool.shutdown(wait=True, timeout=5.0)

        assert "(1 tasks completed, 1 failed)" in caplog.text

    def test_failing_task_does_not_kill_worker(self):
        pool = ThreadPool(workers=1)
        pool.start()
        done = threading.Event()

        def boom():
            raise RuntimeError("task failed")

        pool.submit(boom)
        pool.submit(done.set)

        assert done.wait(timeout=5.0)
        stats = pool.stats
        pool.shutdown()

        assert stats["tasks"]["failed"] == 1

    def test_tasks_wait_when_all_workers_busy(self):
        """Test that the queue absorbs work beyond the pool size."""
        pool = ThreadPool(workers=2)
        pool.start()
        release = threading.Event()
        started = threading.Semaphore(0)

        def blocker():
            started.release()
            release.wait(timeout=5.0)

        for _ in range(5):
            pool.submit(blocker)

        assert started.acquire(timeout=5.0)
        assert started.acquire(timeout=5.0)
        assert pool.queue_size == 3

        release.set()
        pool.shutdown(wait=True, timeout=5.0)

    def test_submit_after_shutdown(self):
        pool = ThreadPool(workers=1)
        pool.start()
        pool.shutdown()

        with pytest.raises(RuntimeError):
            pool.submit(print)

    def test_shutdown_without_wait_drops_pending(self):
        pool = ThreadPool(workers=1)
        pool.start()
        release = threading.Event()
        running = threading.Event()
        ran = []

        def first():
            running.set()
            release.wait(timeout=5.0)

        pool.submit(first)
        assert running.wait(timeout=5.0)
        for n in range(5):
            pool.submit(ran.append, args=(n,))

        # The only worker is still busy, so the join times out quickly
        pool.shutdown(wait=False, timeout=0.1)
        release.set()

        assert ran == []
        assert pool.queue_size <= 1  # At most the poison pill
