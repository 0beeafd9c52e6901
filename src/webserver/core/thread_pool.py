"""
=============================================================================
THREAD POOL
=============================================================================

A fixed number of worker threads pulling tasks from a shared queue. Each
accepted connection becomes one task.

=============================================================================
WHY A FIXED POOL
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   accept thread                  workers (N, fixed at startup)      │
    │                                                                      │
    │   accept() ──► submit(task) ──► [ queue ] ──► Worker-0  run(task)   │
    │                                            ──► Worker-1  run(task)   │
    │                                            ──► ...                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

- Thread-per-connection creates unbounded threads under load.
- A fixed pool bounds concurrency: at most N connections are served at
  once, later ones wait in the queue.
- The queue is unbounded. There is no admission control: when every
  worker is busy, new connections simply wait their turn.

Workers never die because of a task: exceptions are logged and the worker
picks up the next task.

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
    """Worker thread states, for monitoring."""
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """
    A deferred function call: "call func(*args, **kwargs) later".

    Attributes:
        func:         The function to execute.
        args:         Positional arguments.
        kwargs:       Keyword arguments.
        submitted_at: Submission time, to log queueing delay.
    """
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Worker thread that processes tasks from the queue.

        1. Wait for a task (blocking)
        2. None is the "poison pill": exit
        3. Run the task, log any exception
        4. task_done(), back to 1
    """

    def __init__(self, task_queue: queue.Queue, worker_id: int):
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
        """Run one task with state tracking, timing and error logging."""
        self.state = WorkerState.BUSY
        start_time = time.time()
        waited = start_time - task.submitted_at

        try:
            task.func(*task.args, **task.kwargs)
            elapsed = time.time() - start_time
            logger.debug(
                f"Worker {self.worker_id} completed task in {elapsed:.3f}s "
                f"(queued {waited:.3f}s)"
            )
            self.tasks_completed += 1

        except Exception as e:
            # The task failed, the worker stays alive for the next one
            elapsed = time.time() - start_time
            logger.exception(
                f"Worker {self.worker_id} task failed after {elapsed:.3f}s: {e}"
            )
            self.tasks_failed += 1

        finally:
            self.state = WorkerState.IDLE


class ThreadPool:
    """
    Fixed-size thread pool.

        pool = ThreadPool(workers=10)
        pool.start()
        pool.submit(handle_connection, args=(conn,))
        ...
        pool.shutdown(wait=True)
    """

    def __init__(self, workers: int = 10):
        """
        Args:
            workers: Number of worker threads, fixed for the pool's life.

        Raises:
            ValueError: If workers < 1.
        """
        if workers < 1:
            raise ValueError("workers must be >= 1")

        self.workers = workers
        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue()
        self._workers: list = []
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False

    def start(self):
        """Create and start all worker threads. No-op if already started."""
        with self._lock:
            if self._started:
                return

            logger.info(f"Starting thread pool with {self.workers} workers")
            for worker_id in range(self.workers):
                worker = Worker(self._task_queue, worker_id)
                self._workers.append(worker)
                worker.start()

            self._started = True
            self._shutdown = False

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
    ) -> None:
        """
        Queue a task. Never blocks: the queue is unbounded.

        Raises:
            RuntimeError: If the pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")
        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        self._task_queue.put(Task(func=func, args=args, kwargs=kwargs or {}))

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop the pool.

        Args:
            wait:    Let queued tasks finish before stopping the workers.
                     If False, tasks still in the queue are dropped.
            timeout: Per-worker join timeout in seconds (None = forever).
        """
        with self._lock:
            if not self._started:
                return
            self._shutdown = True

        logger.info("Shutting down thread pool...")

        if not wait:
            # Drop pending tasks
            try:
                while True:
                    self._task_queue.get_nowait()
                    self._task_queue.task_done()
            except queue.Empty:
                pass

        # One poison pill per worker, queued behind remaining tasks
        for _ in self._workers:
            self._task_queue.put(None)

        for worker in self._workers:
            worker.join(timeout=timeout)

        stats = self.stats
        logger.debug(f"Thread pool stats at shutdown: {stats}")

        with self._lock:
            self._workers.clear()
            self._started = False

        logger.info(
            f"Thread pool shutdown complete "
            f"({stats['tasks']['completed']} tasks completed, "
            f"{stats['tasks']['failed']} failed)"
        )

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def idle_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.IDLE)

    @property
    def queue_size(self) -> int:
        return self._task_queue.qsize()

    @property
    def stats(self) -> dict:
        """Worker and task counts, e.g. for debug logging."""
        return {
            "workers": {
                "total": len(self._workers),
                "busy": self.busy_workers,
                "idle": self.idle_workers,
            },
            "tasks": {
                "queued": self.queue_size,
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            },
        }
