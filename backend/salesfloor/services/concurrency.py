# Overview: Concurrency helpers shared by the store services: retry policy, ordered locking and sequences.

from __future__ import annotations

import logging
import threading
import time
from contextlib import ExitStack, contextmanager
from typing import Callable, Iterable, Iterator, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@contextmanager
def acquire_in_order(locks: Iterable[threading.RLock]) -> Iterator[None]:
    """
    Hold several locks at once.

    Callers pass locks already sorted by a stable key (product id) so two
    threads reserving overlapping sets cannot deadlock.
    """
    with ExitStack() as stack:
        for lock in locks:
            stack.enter_context(lock)
        yield


def run_with_retry(
    func: Callable[[], T],
    *,
    attempts: int = 3,
    delay: float = 0.0,
    retry_on: tuple[type[BaseException], ...] = (OSError,),
    give_up_on: tuple[type[BaseException], ...] = (),
    description: str = "operation",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Execute an operation with a bounded number of attempts.

    Retries on ``retry_on`` (transient I/O failures by default) with a
    fixed ``delay`` between attempts. Exceptions in ``give_up_on`` are
    re-raised immediately even if they also match ``retry_on``. After the
    last attempt the last exception is re-raised.

    Must not be called while holding a shared lock: the sleep blocks.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    last_exc: BaseException | None = None
    for attempt in range(attempts):
        try:
            return func()
        except give_up_on:
            raise
        except retry_on as exc:
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            logger.warning(
                "%s failed (attempt %d/%d): %s; retrying in %.2fs",
                description, attempt + 1, attempts, exc, delay,
            )
            if delay > 0:
                sleep(delay)
    if last_exc:
        raise last_exc
    raise RuntimeError("unreachable")


class SequenceGenerator:
    """
    Atomic monotonic integer sequence.

    Each owning component keeps its own instance (product ids, cashier ids,
    receipt numbers); values are never shared through module globals.
    """

    def __init__(self, start: int = 1):
        self._start = start
        self._next = start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value

    def advance_past(self, value: int) -> None:
        """Make sure a later next() never hands out ``value`` (used for caller-assigned ids)."""
        with self._lock:
            if value >= self._next:
                self._next = value + 1

    def peek(self) -> int:
        with self._lock:
            return self._next

    def reset(self) -> None:
        with self._lock:
            self._next = self._start
