"""
Worker Registry - Aggregating Callback.

Collapses N independent completion signals into a single
completion event. Signals may arrive from any thread, in any order.
"""

import threading
from typing import Callable
import logging

from .exceptions import CompletionOverflowError, InvalidArgumentError


logger = logging.getLogger(__name__)


class AggregatingCallback:
    """
    Fires ``on_complete`` exactly once, after ``count`` signals.

    Each call of the instance is one signal. The decrement and the
    zero test happen under one lock; ``on_complete`` runs after the
    lock is released, on the thread that delivered the last signal.
    A count of zero fires immediately, inside the constructor.

    Extra signals are a caller contract violation: in strict mode they
    raise CompletionOverflowError, otherwise they are logged and ignored.
    """

    def __init__(
        self,
        count: int,
        on_complete: Callable[[], None],
        strict: bool = True,
    ) -> None:
        if count < 0:
            raise InvalidArgumentError("count", f"must be >= 0, got {count}")
        if not callable(on_complete):
            raise InvalidArgumentError("on_complete", "must be callable")

        self._count = count
        self._remaining = count
        self._on_complete = on_complete
        self._strict = strict
        self._lock = threading.Lock()
        self._completed = False

        if count == 0:
            self._fire()

    @property
    def count(self) -> int:
        """Number of signals this callback waits for."""
        return self._count

    @property
    def remaining(self) -> int:
        """Number of signals still outstanding."""
        with self._lock:
            return self._remaining

    @property
    def completed(self) -> bool:
        """Check if on_complete has been invoked."""
        return self._completed

    def __call__(self) -> None:
        last = False
        with self._lock:
            overflow = self._remaining == 0
            if not overflow:
                self._remaining -= 1
                last = self._remaining == 0

        if overflow:
            if self._strict:
                raise CompletionOverflowError(self._count)
            logger.warning(
                f"Ignoring extra completion signal (expected {self._count})"
            )
            return

        if last:
            self._fire()

    def _fire(self) -> None:
        self._completed = True
        logger.debug(f"All {self._count} completion signal(s) received")
        self._on_complete()

    def __repr__(self) -> str:
        return (
            f"AggregatingCallback(count={self._count}, "
            f"remaining={self._remaining}, completed={self._completed})"
        )


class WorkerCompletion:
    """
    Per-worker view of an AggregatingCallback.

    Handed to a single worker's stop(). Every call made by the worker
    is forwarded, so repeated signals still reach the aggregator.
    complete_if_silent() signals on the worker's behalf only if the
    worker has not signalled yet; once it has, a late signal from the
    worker is dropped.
    """

    def __init__(self, worker_id: str, aggregator: AggregatingCallback) -> None:
        self._worker_id = worker_id
        self._aggregator = aggregator
        self._lock = threading.Lock()
        self._signalled = False
        self._substituted = False

    @property
    def worker_id(self) -> str:
        return self._worker_id

    @property
    def aggregator(self) -> AggregatingCallback:
        return self._aggregator

    @property
    def signalled(self) -> bool:
        """Check if a completion has been delivered for this worker."""
        return self._signalled

    def __call__(self) -> None:
        with self._lock:
            if self._substituted:
                logger.debug(
                    f"Dropping late completion signal from worker {self._worker_id}"
                )
                return
            self._signalled = True
        self._aggregator()

    def complete_if_silent(self) -> bool:
        """
        Signal for the worker if it never did.

        Returns:
            True if a signal was delivered on the worker's behalf
        """
        with self._lock:
            if self._signalled:
                return False
            self._signalled = True
            self._substituted = True
        self._aggregator()
        return True

    def __repr__(self) -> str:
        return (
            f"WorkerCompletion(worker_id={self._worker_id!r}, "
            f"signalled={self._signalled})"
        )
