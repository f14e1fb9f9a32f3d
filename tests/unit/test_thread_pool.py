"""
Unit tests for the bounded worker pool.
"""

import threading

import pytest

from simplehttp.core.thread_pool import ThreadPool


@pytest.fixture
def pool():
    pool = ThreadPool(min_workers=1, max_workers=2, queue_size=2)
    pool.start()
    yield pool
    pool.shutdown(wait=True, timeout=2.0)


class TestThreadPool:

    def test_runs_tasks(self, pool: ThreadPool):
        done = threading.Event()
        results = []

        def task(value):
            results.append(value)
            done.set()

        assert pool.submit(task, args=(42,))
        assert done.wait(timeout=2.0)
        assert results == [42]

    def test_submit_before_start_fails(self):
        with pytest.raises(RuntimeError, match="not started"):
            ThreadPool().submit(print)

    def test_submit_after_shutdown_fails(self):
        pool = ThreadPool(min_workers=1, max_workers=1)
        pool.start()
        pool.shutdown(wait=True, timeout=2.0)

        with pytest.raises(RuntimeError, match="shutting down"):
            pool.submit(print)

    def test_full_queue_rejects(self):
        pool = ThreadPool(min_workers=1, max_workers=1, queue_size=1)
        pool.start()
        release = threading.Event()
        started = threading.Event()

        def blocker():
            started.set()
            release.wait(timeout=5.0)

        try:
            assert pool.submit(blocker)
            assert started.wait(timeout=2.0)
            assert pool.submit(blocker)       # waits in the queue
            assert not pool.submit(blocker)   # no room left
        finally:
            release.set()
            pool.shutdown(wait=True, timeout=2.0)

    def test_scales_up_to_max(self):
        pool = ThreadPool(min_workers=1, max_workers=2, queue_size=4)
        pool.start()
        release = threading.Event()
        started = threading.Event()

        def blocker():
            started.set()
            release.wait(timeout=5.0)

        try:
            pool.submit(blocker)
            assert started.wait(timeout=2.0)
            pool.submit(blocker)
            pool.submit(blocker)

            assert pool.worker_count == 2
        finally:
            release.set()
            pool.shutdown(wait=True, timeout=2.0)

    def test_failing_task_is_counted(self, caplog):
        # One worker, so tasks run in submission order
        pool = ThreadPool(min_workers=1, max_workers=1, queue_size=4)
        pool.start()
        done = threading.Event()

        def broken():
            raise ValueError("boom")

        try:
            pool.submit(broken)
            pool.submit(done.set)
            assert done.wait(timeout=2.0)

            assert pool.stats["tasks"]["failed"] == 1
            assert "boom" in caplog.text
        finally:
            pool.shutdown(wait=True, timeout=2.0)
