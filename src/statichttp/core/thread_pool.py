"""
=============================================================================
BOUNDED THREAD POOL
=============================================================================

Optional dispatch mode for connections: a fixed number of worker threads
pulling from a queue of bounded size.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   accept loop ──submit()──►  [ task | task | task | ... ]  (bounded) │
    │                                   │      │      │                    │
    │                                   ▼      ▼      ▼                    │
    │                               Worker-0 Worker-1 Worker-2             │
    │                                                                      │
    │   queue full → submit() returns False immediately                    │
    │                (the server answers 503 on the caller's thread)       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Shutdown puts one None ("poison pill") per worker on the queue. Each worker
exits when it takes one, after the tasks queued in front of it are done.

The default server mode does not use this pool at all: it starts one
thread per connection.

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional
import logging
import queue
import threading
import time


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """A deferred call: func(*args)."""

    func: Callable[..., Any]
    args: tuple = ()
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Takes tasks off the shared queue until it receives None.

    A task that raises is logged with its traceback; the worker keeps
    running.
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
        self.state = WorkerState.BUSY
        start_time = time.time()

        try:
            task.func(*task.args)
            self.tasks_completed += 1
        except Exception as e:
            logger.exception(
                f"Worker {self.worker_id} task failed after {time.time() - start_time:.3f}s: {e}"
            )
            self.tasks_failed += 1
        finally:
            self.state = WorkerState.IDLE


class ThreadPool:
    """
    Fixed-size pool with a bounded task queue.

    Args:
        workers: Number of worker threads.
        queue_size: Maximum number of tasks waiting for a worker.

    Usage:
        pool = ThreadPool(workers=4, queue_size=64)
        pool.start()
        if not pool.submit(handle, conn):
            reject(conn)
        pool.shutdown()
    """

    def __init__(self, workers: int = 4, queue_size: int = 64):
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")

        self.workers = workers
        self.queue_size = queue_size

        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue(maxsize=queue_size)
        self._workers: List[Worker] = []
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False

    @property
    def is_running(self) -> bool:
        return self._started and not self._shutdown

    def start(self):
        """Start the worker threads. Calling it again is a no-op."""
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

    def submit(self, func: Callable[..., Any], *args) -> bool:
        """
        Queue func(*args) without blocking.

        Returns:
            True if queued, False if the queue is full.

        Raises:
            RuntimeError: The pool is not running.
        """
        if not self.is_running:
            raise RuntimeError("Thread pool is not running")

        try:
            self._task_queue.put_nowait(Task(func=func, args=args))
        except queue.Full:
            logger.debug(f"Task queue full ({self.queue_size}), rejecting task")
            return False
        return True

    def shutdown(self, wait: bool = True, timeout: float = 5.0):
        """
        Stop all workers.

        Args:
            wait: Join each worker, up to timeout seconds apiece.
            timeout: Per-worker join timeout.
        """
        with self._lock:
            if not self._started or self._shutdown:
                return
            self._shutdown = True

        logger.info("Shutting down thread pool...")

        # Blocking put: pending tasks finish first, then each worker takes a pill
        for _ in self._workers:
            self._task_queue.put(None)

        if wait:
            for worker in self._workers:
                worker.join(timeout=timeout)

        self._workers.clear()
        self._started = False
        logger.info("Thread pool shutdown complete")

    @property
    def pending(self) -> int:
        """Tasks waiting for a worker."""
        return self._task_queue.qsize()

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def stats(self) -> dict:
        return {
            "workers": {
                "total": len(self._workers),
                "busy": self.busy_workers,
            },
            "tasks": {
                "queued": self.pending,
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            },
        }
