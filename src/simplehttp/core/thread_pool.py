"""
=============================================================================
BOUNDED THREAD POOL
=============================================================================

A fixed-ceiling pool of worker threads fed from a bounded queue. The
accept loop submits connections here and goes straight back to accept().

=============================================================================
WHY NOT A THREAD PER CONNECTION?
=============================================================================

Spawning a thread per connection has no upper bound: a burst of clients
means a burst of threads, each with its own stack. Spawning a thread and
then JOINING it before the next accept() is bounded, but serializes every
client behind the slowest one.

A pool sits in between:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   accept loop ──submit()──► [ queue (queue_size) ]                  │
    │                                   │     │     │                      │
    │                                   ▼     ▼     ▼                      │
    │                               Worker Worker Worker  ... max_workers  │
    │                                                                      │
    │   queue full? submit() returns False: the caller drops the client   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Workers start at min_workers and are added (up to max_workers) when a
task is submitted while every existing worker is busy.

=============================================================================
SHUTDOWN: POISON PILLS
=============================================================================

shutdown() puts one None per worker on the queue. A worker that takes
None off the queue exits its loop. Tasks queued before the pills are
still processed.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """
    A deferred function call.

    Attributes:
        func: The function to execute.
        args: Positional arguments.
        kwargs: Keyword arguments.
        submitted_at: Submission time, for queue-wait logging.
    """
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Pulls tasks off the shared queue until it receives a poison pill.

    A task that raises is logged with its traceback and counted; the
    worker itself keeps running.
    """

    def __init__(self, task_queue: "queue.Queue[Optional[Task]]", worker_id: int):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.task_queue = task_queue
        self.worker_id = worker_id
        self.state = WorkerState.IDLE

        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while True:
            task = self.task_queue.get()
            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.time()
        waited = start_time - task.submitted_at

        try:
            task.func(*task.args, **task.kwargs)
            self.tasks_completed += 1
            logger.debug(
                f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s "
                f"(queued {waited:.3f}s)"
            )
        except Exception as e:
            self.tasks_failed += 1
            logger.exception(f"Worker {self.worker_id} task failed: {e}")
        finally:
            self.state = WorkerState.IDLE


class ThreadPool:
    """
    Bounded pool of worker threads.

    Usage:
        pool = ThreadPool(min_workers=2, max_workers=8, queue_size=64)
        pool.start()

        if not pool.submit(handle, args=(conn,)):
            conn.close()   # Overloaded

        pool.shutdown(wait=True)
    """

    def __init__(
        self,
        min_workers: int = 2,
        max_workers: int = 8,
        queue_size: int = 64,
    ):
        self.min_workers = min_workers
        self.max_workers = max_workers
        self.queue_size = queue_size

        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue(maxsize=queue_size)

        self._workers: list[Worker] = []
        self._lock = threading.Lock()  # Guards _workers
        self._started = False
        self._shutdown = False
        self._next_worker_id = 0

    @property
    def worker_count(self) -> int:
        with self._lock:
            return len(self._workers)

    def start(self):
        """Start min_workers worker threads. Idempotent."""
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.min_workers} workers (max {self.max_workers})")

        with self._lock:
            for _ in range(self.min_workers):
                self._add_worker()

        self._started = True

    def _add_worker(self) -> Worker:
        """Create and start one worker. Caller holds _lock."""
        worker = Worker(self._task_queue, self._next_worker_id)
        self._next_worker_id += 1
        self._workers.append(worker)
        worker.start()
        return worker

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        block: bool = False,
        queue_timeout: Optional[float] = None,
    ) -> bool:
        """
        Queue a task for execution.

        Args:
            func: Function to run on a worker.
            args: Positional arguments.
            kwargs: Keyword arguments.
            block: Wait for queue space instead of failing immediately.
            queue_timeout: Upper bound on that wait.

        Returns:
            True if queued, False if the queue was full.

        Raises:
            RuntimeError: Pool not started, or shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")

        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        task = Task(func=func, args=args, kwargs=kwargs or {})

        try:
            self._task_queue.put(task, block=block, timeout=queue_timeout)
        except queue.Full:
            return False

        self._maybe_scale_up()
        return True

    def _maybe_scale_up(self):
        """Add a worker when all are busy and there is still headroom."""
        with self._lock:
            busy = sum(1 for w in self._workers if w.state == WorkerState.BUSY)
            if busy >= len(self._workers) and len(self._workers) < self.max_workers:
                worker = self._add_worker()
                logger.debug(f"Scaled up: added worker {worker.worker_id}")

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop all workers.

        Args:
            wait: Join the worker threads before returning.
            timeout: Per-worker join timeout.
        """
        if self._shutdown:
            return

        self._shutdown = True
        logger.info("Shutting down thread pool...")

        with self._lock:
            workers = list(self._workers)

        # Blocking put: pills queue up behind pending tasks
        for _ in workers:
            self._task_queue.put(None)

        if wait:
            for worker in workers:
                worker.join(timeout=timeout)

        logger.info("Thread pool stopped")

    @property
    def stats(self) -> dict:
        """Snapshot of pool state for logging and tests."""
        with self._lock:
            workers = list(self._workers)

        return {
            "workers": {
                "total": len(workers),
                "busy": sum(1 for w in workers if w.state == WorkerState.BUSY),
                "idle": sum(1 for w in workers if w.state == WorkerState.IDLE),
            },
            "queue": {
                "size": self._task_queue.qsize(),
                "max": self.queue_size,
            },
            "tasks": {
                "completed": sum(w.tasks_completed for w in workers),
                "failed": sum(w.tasks_failed for w in workers),
            },
        }
