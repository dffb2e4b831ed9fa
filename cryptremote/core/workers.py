"""
Crypt Worker Pool
=================

Runs independent crypt operations in parallel.

Each task names one operation from a closed set (Operation) and carries
its own payload. Tasks never share state, so a single immutable Cipher
is shared by every worker and no coordination is needed. Results are
correlated with submissions through the task id.

Failure Handling:
    - A CryptError raised by the core is captured in the TaskResult
    - Any other exception propagates to the caller of result()
"""

from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional, Union

from cryptremote.core.crypto.cipher import Cipher
from cryptremote.core.crypto.errors import ConfigurationError, CryptError

Payload = Union[bytes, str]


class Operation(Enum):
    """Operations a worker can run."""

    ENCRYPT_DATA = "encrypt_data"
    DECRYPT_DATA = "decrypt_data"
    ENCRYPT_PATH = "encrypt_path"
    DECRYPT_PATH = "decrypt_path"


@dataclass(frozen=True, slots=True)
class Task:
    """
    One unit of work.

    Attributes:
        task_id: Caller-chosen id used to match the result
        operation: What to do with the payload
        payload: bytes for data operations, str for path operations
    """

    task_id: int
    operation: Operation
    payload: Payload

    def __repr__(self) -> str:
        """Safe representation without payload contents."""
        return f"Task(task_id={self.task_id}, operation={self.operation.value}, payload_len={len(self.payload)})"


@dataclass(frozen=True, slots=True)
class TaskResult:
    """Outcome of a Task: exactly one of result / error is set."""

    task_id: int
    operation: Operation
    result: Optional[Payload] = None
    error: Optional[CryptError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Payload:
        """Return the result or raise the captured error."""
        if self.error is not None:
            raise self.error
        return self.result


def _require(payload: Payload, kind: type) -> Payload:
    if not isinstance(payload, kind):
        raise TypeError(f"payload must be {kind.__name__}, got {type(payload).__name__}")
    return payload


def dispatch(cipher: Cipher, task: Task) -> Payload:
    """
    Run a single task against ``cipher``.

    Raises:
        ConfigurationError: If the operation is not a known Operation
        CryptError: Whatever the core raises for the payload
    """
    operation = task.operation
    if operation is Operation.ENCRYPT_DATA:
        return cipher.encrypt_data(_require(task.payload, bytes))
    if operation is Operation.DECRYPT_DATA:
        return cipher.decrypt_data(_require(task.payload, bytes))
    if operation is Operation.ENCRYPT_PATH:
        return cipher.encrypt_file_name(_require(task.payload, str))
    if operation is Operation.DECRYPT_PATH:
        return cipher.decrypt_file_name(_require(task.payload, str))
    raise ConfigurationError(f"unknown operation: {operation!r}")


def run_task(cipher: Cipher, task: Task) -> TaskResult:
    """Run a task, capturing crypt failures in the result."""
    try:
        result = dispatch(cipher, task)
    except CryptError as e:
        return TaskResult(task_id=task.task_id, operation=task.operation, error=e)
    return TaskResult(task_id=task.task_id, operation=task.operation, result=result)


class CryptoWorkerPool:
    """
    Bounded pool of crypt workers sharing one Cipher.

    Usage:
        with CryptoWorkerPool(cipher, max_workers=4) as pool:
            future = pool.submit_operation(Operation.ENCRYPT_DATA, data)
            blob = future.result().unwrap()

            for result in pool.map(tasks):
                ...

    Notes:
        - libsodium and OpenSSL release the GIL while processing blocks,
          so threads give real parallelism for large payloads
        - Closing the pool waits for in-flight tasks
    """

    __slots__ = ("_cipher", "_executor", "_ids", "_id_lock", "_log", "_max_workers")

    def __init__(self, cipher: Cipher, max_workers: int = 4) -> None:
        """
        Initialize the pool.

        Args:
            cipher: Keyed transform context shared by all workers
            max_workers: Upper bound on concurrent tasks
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._cipher = cipher
        self._max_workers = max_workers
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="crypt-worker",
        )
        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()
        self._log = logging.getLogger("cryptremote.workers")

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def next_task_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    def submit(self, task: Task) -> Future[TaskResult]:
        """Queue a task; the future resolves to its TaskResult."""
        self._log.debug("Submitting %r", task)
        return self._executor.submit(self._run, task)

    def submit_operation(self, operation: Operation, payload: Payload) -> Future[TaskResult]:
        """Queue an operation with an automatically assigned task id."""
        return self.submit(Task(task_id=self.next_task_id(), operation=operation, payload=payload))

    def map(self, tasks: Iterable[Task]) -> Iterator[TaskResult]:
        """Run tasks concurrently, yielding results in submission order."""
        futures = [self.submit(task) for task in tasks]
        for future in futures:
            yield future.result()

    def _run(self, task: Task) -> TaskResult:
        result = run_task(self._cipher, task)
        if not result.ok:
            self._log.warning(
                "Task %d (%s) failed: %s", task.task_id, task.operation.value, result.error
            )
        return result

    def close(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> CryptoWorkerPool:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
