"""
=============================================================================
THREAD POOL
=============================================================================

Worker threads that each take one accepted connection at a time from a
bounded queue. A client that stalls ties up exactly one worker until its
socket timeout fires; the other workers keep serving.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   accept thread                                                      │
    │        │ submit(block=False)                                         │
    │        ▼                                                             │
    │   ┌───────────────────────────────────────────┐   full? → False      │
    │   │ queue.Queue(maxsize=queue_size)           │   (server sends 503) │
    │   └───────────────────────────────────────────┘                      │
    │        │ get()            │ get()             │ get()                │
    │        ▼                  ▼                   ▼                      │
    │   pool-worker-0      pool-worker-1   ...  pool-worker-N  (N < max)  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Growth: `min_workers` threads start with the pool. When a job is queued
while every thread is busy, one more is started, up to `max_workers`.
Threads are never retired early; they all live until shutdown.

Shutdown: stop taking jobs, optionally wait for the queue to drain, then
queue one `None` per thread. A thread exits when it dequeues `None`.

=============================================================================
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional


logger = logging.getLogger(__name__)

# Queue sentinel telling a worker to exit
STOP = None


@dataclass
class Job:
    """One queued call, usually `_process_connection(conn)`."""
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    queued_at: float = field(default_factory=time.monotonic)

    @property
    def wait_time(self) -> float:
        """Seconds the job has spent in the queue so far."""
        return time.monotonic() - self.queued_at


class Worker(threading.Thread):
    """
    Pulls jobs until it sees STOP or its stop flag is set.

    A job that raises is logged with its traceback and counted as
    failed; the thread keeps going.
    """

    def __init__(self, pool: "ThreadPool", number: int):
        super().__init__(name=f"pool-worker-{number}", daemon=True)
        self.pool = pool
        self.busy = False
        self.completed = 0
        self.failed = 0
        self._stopping = threading.Event()

    def run(self):
        jobs = self.pool._jobs
        logger.debug(f"{self.name} ready")

        while not self._stopping.is_set():
            try:
                job = jobs.get(timeout=self.pool.idle_timeout)
            except queue.Empty:
                continue

            if job is STOP:
                jobs.task_done()
                break

            try:
                self._run_job(job)
            finally:
                jobs.task_done()

        logger.debug(f"{self.name} exiting")

    def _run_job(self, job: Job):
        self.busy = True
        waited = job.wait_time
        started = time.monotonic()
        try:
            job.func(*job.args, **job.kwargs)
        except Exception as e:
            self.failed += 1
            logger.exception(f"{self.name}: job raised {type(e).__name__}: {e}")
        else:
            self.completed += 1
            logger.debug(
                f"{self.name}: job done in {time.monotonic() - started:.3f}s "
                f"(queued {waited:.3f}s)"
            )
        finally:
            self.busy = False

    def stop(self):
        self._stopping.set()


class ThreadPool:
    """
    Fixed-floor, capped-ceiling pool of worker threads.

        pool = ThreadPool(min_workers=4, max_workers=16, queue_size=100)
        pool.start()
        if not pool.submit(process, args=(conn,), block=False):
            reject(conn)
        pool.shutdown(wait=True, timeout=30)
    """

    def __init__(
        self,
        min_workers: int = 4,
        max_workers: int = 16,
        queue_size: int = 100,
        idle_timeout: float = 1.0,
    ):
        """
        Args:
            min_workers: Threads started by start().
            max_workers: Upper limit on threads.
            queue_size: Jobs that may wait for a free thread.
            idle_timeout: How often an idle thread re-checks its stop flag.

        Raises:
            ValueError: min_workers < 1 or max_workers < min_workers.
        """
        if min_workers < 1 or max_workers < min_workers:
            raise ValueError(
                f"Invalid worker bounds: min={min_workers}, max={max_workers}"
            )

        self.min_workers = min_workers
        self.max_workers = max_workers
        self.queue_size = queue_size
        self.idle_timeout = idle_timeout

        self._jobs: "queue.Queue[Optional[Job]]" = queue.Queue(maxsize=queue_size)
        self._workers: list[Worker] = []
        self._workers_lock = threading.Lock()
        self._spawned = 0
        self._accepting = False

    def start(self) -> "ThreadPool":
        """Start min_workers threads. Calling it again is a no-op."""
        with self._workers_lock:
            if self._accepting:
                return self
            for _ in range(self.min_workers):
                self._spawn_locked()
            self._accepting = True

        logger.info(
            f"Thread pool started: {self.min_workers} workers "
            f"(max {self.max_workers}, queue {self.queue_size})"
        )
        return self

    def _spawn_locked(self):
        worker = Worker(self, self._spawned)
        self._spawned += 1
        self._workers.append(worker)
        worker.start()

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        block: bool = True,
        queue_timeout: Optional[float] = None,
    ) -> bool:
        """
        Queue `func(*args, **kwargs)` for a worker.

        Returns:
            False when the queue stayed full (immediately if block=False,
            after queue_timeout otherwise). True once queued.

        Raises:
            RuntimeError: The pool was never started or is shutting down.
        """
        if not self._accepting:
            raise RuntimeError("Thread pool is not accepting jobs")

        try:
            self._jobs.put(
                Job(func, args, kwargs or {}),
                block=block,
                timeout=queue_timeout,
            )
        except queue.Full:
            return False

        self._grow_if_saturated()
        return True

    def _grow_if_saturated(self):
        with self._workers_lock:
            count = len(self._workers)
            if count >= self.max_workers or self._jobs.empty():
                return
            if all(w.busy for w in self._workers):
                logger.debug(f"All {count} workers busy, adding one")
                self._spawn_locked()

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop the pool.

        Args:
            wait: Let already queued jobs run first.
            timeout: Give up waiting for queued jobs after this many
                     seconds. None waits indefinitely.
        """
        with self._workers_lock:
            if not self._accepting:
                return
            self._accepting = False
            workers, self._workers = self._workers, []

        logger.info(f"Stopping thread pool ({self._jobs.qsize()} jobs queued)")

        if wait:
            self._drain(timeout)

        for worker in workers:
            worker.stop()
            try:
                self._jobs.put_nowait(STOP)
            except queue.Full:
                pass  # The stop flag ends the loop on its next idle poll

        for worker in workers:
            worker.join(timeout=2.0)

        logger.info("Thread pool stopped")

    def _drain(self, timeout: Optional[float]):
        deadline = None if timeout is None else time.monotonic() + timeout
        while self._jobs.unfinished_tasks:
            if deadline is not None and time.monotonic() >= deadline:
                logger.warning(
                    f"Gave up waiting for {self._jobs.unfinished_tasks} jobs"
                )
                return
            time.sleep(0.05)

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def worker_count(self) -> int:
        return len(self._workers)

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.busy)

    @property
    def pending_tasks(self) -> int:
        return self._jobs.qsize()

    @property
    def stats(self) -> dict:
        workers = list(self._workers)
        return {
            "workers": {
                "total": len(workers),
                "busy": sum(1 for w in workers if w.busy),
            },
            "tasks": {
                "queued": self.pending_tasks,
                "completed": sum(w.completed for w in workers),
                "failed": sum(w.failed for w in workers),
            },
        }
