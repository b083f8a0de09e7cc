"""Fixed-size worker thread pool backed by an unbounded FIFO queue.

Two submission paths are provided:

- ``enqueue(task)`` is fire-and-forget. Tasks enqueued after shutdown has
  begun are dropped silently, and failures are logged by the worker but never
  reach the submitter.
- ``submit(fn, ...)`` returns a ``TaskHandle`` whose ``result()`` is a
  ``TaskResult`` carrying either the return value or the raised exception.

The pool can run many batches between construction and ``shutdown()``. After
shutdown it is inert.
"""

from __future__ import annotations

import os
import queue
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final

from loguru import logger

from forestkit.exceptions import PoolClosedError, TaskCancelledError

if TYPE_CHECKING:
    from types import TracebackType

type Task = Callable[[], Any]

_STOP: Final[object] = object()


def default_worker_count() -> int:
    """Return the host's available parallelism (at least 1)."""
    return os.cpu_count() or 1


@dataclass(frozen=True)
class TaskResult:
    """Outcome of a submitted task.

    Attributes:
        ok (bool): True if the task returned normally.
        value (Any): The task's return value when `ok` is True, else None.
        error (BaseException | None): The raised exception when `ok` is False.
    """

    ok: bool
    value: Any = None
    error: BaseException | None = None

    @classmethod
    def success(cls, value: Any) -> TaskResult:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: BaseException) -> TaskResult:
        return cls(ok=False, error=error)

    def unwrap(self) -> Any:
        """Return the value, or raise the stored error.

        Returns:
            Any: The task's return value.

        Raises:
            BaseException: The exception raised by the task.
        """
        if self.error is not None:
            raise self.error
        return self.value


class TaskHandle:
    """Handle to a task submitted with `WorkerPool.submit`."""

    def __init__(self, fn: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        self._fn = fn
        self._args = args
        self._kwargs = kwargs
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._started = False
        self._result: TaskResult | None = None

    def cancel(self) -> bool:
        """Prevent the task from running if it has not started yet.

        Returns:
            bool: True if the task was cancelled; False if it already started.
        """
        with self._lock:
            if self._started or self._result is not None:
                return False
            self._result = TaskResult.failure(TaskCancelledError("Task was cancelled before it started"))
        self._done.set()
        return True

    @property
    def cancelled(self) -> bool:
        result = self._result
        return result is not None and isinstance(result.error, TaskCancelledError)

    def done(self) -> bool:
        return self._done.is_set()

    def result(self, timeout: float | None = None) -> TaskResult:
        """Block until the task finishes and return its outcome.

        Args:
            timeout (float | None): Seconds to wait; None waits forever.

        Returns:
            TaskResult: Success with the value, or failure with the exception.

        Raises:
            TimeoutError: If the task did not finish within `timeout`.
            RuntimeError: If the task finished without recording an outcome.
        """
        if not self._done.wait(timeout):
            raise TimeoutError(f"Task did not finish within {timeout} seconds")
        result = self._result
        if result is None:
            raise RuntimeError("Task finished without recording an outcome")
        return result

    def _run(self) -> None:
        with self._lock:
            if self._result is not None:  # cancelled
                return
            self._started = True
        try:
            value = self._fn(*self._args, **self._kwargs)
        except Exception as exc:
            self._finish(TaskResult.failure(exc))
        except BaseException as exc:
            # Outcome is recorded before the worker unwinds.
            self._finish(TaskResult.failure(exc))
            raise
        else:
            self._finish(TaskResult.success(value))

    def _finish(self, outcome: TaskResult) -> None:
        self._result = outcome
        self._done.set()


class WorkerPool:
    """Fixed-size pool of worker threads consuming a FIFO task queue.

    Examples:
        >>> with WorkerPool(num_workers=2) as pool:  # doctest: +SKIP
        ...     results = pool.run_batch([lambda: 1, lambda: 2])
        >>> [r.value for r in results]  # doctest: +SKIP
        [1, 2]
    """

    def __init__(self, num_workers: int | None = None) -> None:
        """Start the worker threads.

        Args:
            num_workers (int | None): Number of threads; defaults to the
                host's available parallelism.

        Raises:
            ValueError: If `num_workers` is less than 1.
        """
        num_workers = default_worker_count() if num_workers is None else num_workers
        if num_workers < 1:
            raise ValueError(f"num_workers must be at least 1, got {num_workers}")

        self._queue: queue.Queue[object] = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._workers: list[threading.Thread] = []
        for i in range(num_workers):
            worker = threading.Thread(target=self._work, name=f"forestkit-worker-{i}", daemon=True)
            worker.start()
            self._workers.append(worker)
        logger.debug("Worker pool started", num_workers=num_workers)

    @property
    def num_workers(self) -> int:
        return len(self._workers)

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def enqueue(self, task: Task) -> None:
        """Append a zero-argument task to the queue.

        The task is dropped silently if shutdown has begun. Exceptions raised
        by the task are logged by the worker and are not returned to the caller.

        Args:
            task (Task): The callable to run.
        """
        with self._lock:
            if self._closed:
                logger.debug("Task dropped; pool is shut down")
                return
            self._queue.put(task)

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> TaskHandle:
        """Schedule `fn(*args, **kwargs)` and return a handle to its result.

        Args:
            fn (Callable[..., Any]): The function to run on a worker.
            *args (Any): Positional arguments for `fn`.
            **kwargs (Any): Keyword arguments for `fn`.

        Returns:
            TaskHandle: Handle for waiting on or cancelling the task.

        Raises:
            PoolClosedError: If the pool has been shut down.
        """
        handle = TaskHandle(fn, args, kwargs)
        with self._lock:
            if self._closed:
                raise PoolClosedError("Cannot submit to a worker pool that has been shut down")
            self._queue.put(handle._run)
        return handle

    def run_batch(self, calls: Iterable[Task]) -> list[TaskResult]:
        """Run a batch of zero-argument callables and wait for all of them.

        Args:
            calls (Iterable[Task]): The callables to run.

        Returns:
            list[TaskResult]: One result per callable, in submission order.
        """
        handles = [self.submit(call) for call in calls]
        return [handle.result() for handle in handles]

    def shutdown(self, *, wait: bool = True) -> None:
        """Stop accepting work and let the workers drain the queue.

        One stop marker per worker is queued behind the pending tasks, so every
        task enqueued before shutdown still runs. Calling this more than once
        is harmless.

        Args:
            wait (bool): Block until all workers have exited.
        """
        with self._lock:
            already_closed = self._closed
            self._closed = True
            if not already_closed:
                for _ in self._workers:
                    self._queue.put(_STOP)
        if wait:
            self._join_workers()
        if not already_closed:
            logger.debug("Worker pool shut down", num_workers=len(self._workers))

    def __enter__(self) -> WorkerPool:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.shutdown()

    def _work(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            try:
                item()  # type: ignore[operator]
            except Exception:
                logger.exception("Unhandled exception in enqueued task")
            except BaseException:
                logger.exception("Worker thread stopped by a task; starting a replacement")
                self._replace_worker(threading.current_thread())
                raise

    def _replace_worker(self, dying: threading.Thread) -> None:
        with self._lock:
            position = self._workers.index(dying)
            replacement = threading.Thread(target=self._work, name=dying.name, daemon=True)
            self._workers[position] = replacement
            replacement.start()

    def _join_workers(self) -> None:
        # Replacements may be added while joining.
        joined: set[threading.Thread] = {threading.current_thread()}
        while True:
            with self._lock:
                pending = [worker for worker in self._workers if worker not in joined]
            if not pending:
                return
            for worker in pending:
                worker.join()
                joined.add(worker)
