"""
Worker Registry - Worker and Factory Contracts.

============================================================
CAPABILITY CONTRACTS
============================================================

Defines what the registry needs from its collaborators:
- ManagedWorker: start/stop/is_running/is_auto_startup/get_phase
- WorkerFactory: builds one worker from an endpoint
- BaseWorker: convenience base with sensible defaults
- CallableWorkerFactory: adapts a plain function to WorkerFactory

Optional capabilities (initialize, dispose) are not part of the
protocol. They are detected once by resolve_capabilities().

============================================================
"""

import threading
from typing import Any, Callable, Optional, Protocol, Tuple, runtime_checkable
import logging

from .models import DEFAULT_PHASE


logger = logging.getLogger(__name__)

CompletionCallback = Callable[[], None]


# =============================================================
# PROTOCOLS
# =============================================================


@runtime_checkable
class ManagedWorker(Protocol):
    """Protocol that all managed workers should implement."""

    def start(self) -> None:
        """Start consuming."""
        ...

    def stop(self, callback: Optional[CompletionCallback] = None) -> None:
        """
        Stop consuming.

        Without a callback this blocks until stopped. With a callback it
        may return immediately but must invoke the callback exactly once
        when the worker has stopped.
        """
        ...

    def is_running(self) -> bool:
        """Check if the worker is running."""
        ...

    def is_auto_startup(self) -> bool:
        """Check if the worker should be started by start_all()."""
        ...

    def get_phase(self) -> int:
        """Get lifecycle phase (DEFAULT_PHASE if none)."""
        ...


@runtime_checkable
class WorkerFactory(Protocol):
    """Protocol for factories that build workers from endpoints."""

    def create_worker(self, endpoint: Any) -> ManagedWorker:
        """Create a worker for the given endpoint."""
        ...


# =============================================================
# CAPABILITY RESOLUTION
# =============================================================


def _optional_capability(worker: Any, name: str) -> Optional[CompletionCallback]:
    capability = getattr(worker, name, None)
    return capability if callable(capability) else None


def resolve_capabilities(
    worker: Any,
) -> Tuple[Optional[CompletionCallback], Optional[CompletionCallback]]:
    """
    Detect the optional capabilities of a worker.

    Returns:
        (initializer, disposer), each a bound method or None
    """
    return (
        _optional_capability(worker, "initialize"),
        _optional_capability(worker, "dispose"),
    )


# =============================================================
# BASE WORKER
# =============================================================


class BaseWorker:
    """
    Base class for workers with simple start/stop semantics.

    Subclasses override _do_start() and _do_stop(). The asynchronous
    stop is implemented on top of the blocking one: the callback is
    always invoked, even if stopping raised.
    """

    def __init__(
        self,
        auto_startup: bool = True,
        phase: int = DEFAULT_PHASE,
    ) -> None:
        self._auto_startup = auto_startup
        self._phase = phase
        self._running = False
        self._lock = threading.Lock()

    def _do_start(self) -> None:
        """No-op start."""
        pass

    def _do_stop(self) -> None:
        """No-op stop."""
        pass

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._do_start()
            self._running = True
        logger.debug(f"Started {self.__class__.__name__}")

    def stop(self, callback: Optional[CompletionCallback] = None) -> None:
        try:
            with self._lock:
                if self._running:
                    self._do_stop()
                    self._running = False
        finally:
            if callback is not None:
                callback()
        logger.debug(f"Stopped {self.__class__.__name__}")

    def is_running(self) -> bool:
        return self._running

    def is_auto_startup(self) -> bool:
        return self._auto_startup

    def get_phase(self) -> int:
        return self._phase


# =============================================================
# FACTORY ADAPTER
# =============================================================


class CallableWorkerFactory:
    """
    Adapts a function ``endpoint -> worker`` to the WorkerFactory protocol.
    """

    def __init__(self, create: Callable[[Any], ManagedWorker]) -> None:
        self._create = create

    def create_worker(self, endpoint: Any) -> ManagedWorker:
        return self._create(endpoint)

    def __repr__(self) -> str:
        name = getattr(self._create, "__name__", repr(self._create))
        return f"CallableWorkerFactory({name})"


# =============================================================
# EXPORTS
# =============================================================

__all__ = [
    "CompletionCallback",
    "ManagedWorker",
    "WorkerFactory",
    "resolve_capabilities",
    "BaseWorker",
    "CallableWorkerFactory",
]
