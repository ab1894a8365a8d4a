"""
Worker Registry - Lifecycle Registry.

============================================================
RESPONSIBILITY
============================================================
Owns a set of managed workers and drives their collective
lifecycle as a single unit.

- Register workers under unique identifiers
- Derive a shared phase and reject conflicting ones
- Start/stop workers in registration order
- Aggregate asynchronous stop completions into one callback
- Dispose every worker, isolating failures

The registry is a lifecycle participant, not a driver: it exposes
start/stop/is_running/get_phase/is_auto_startup/dispose so an outer
lifecycle driver can decide when to call them.

============================================================
"""

import threading
from typing import Any, Callable, Dict, List, Optional
import logging

from .base import ManagedWorker, WorkerFactory, resolve_capabilities
from .callbacks import AggregatingCallback, WorkerCompletion
from .config import RegistryConfig, get_config
from .exceptions import (
    DuplicateIdentifierError,
    InitializationFailedError,
    InvalidArgumentError,
    PhaseConflictError,
    RegistryDisposedError,
)
from .models import DEFAULT_PHASE, RegisteredWorker, RegistryState, is_custom_phase


logger = logging.getLogger(__name__)


def _require_text(value: Any, argument: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(argument, "must be a non-blank string")
    return value


# ============================================================
# WORKER REGISTRY
# ============================================================

class WorkerRegistry:
    """
    Registry of managed workers.

    ============================================================
    ORDERING
    ============================================================

    Registration order is preserved and used for every fan-out
    (start, stop, dispose). Entries are never replaced or removed;
    the mapping is discarded as a whole on disposal.

    ============================================================
    THREAD SAFETY
    ============================================================

    Registration is expected to complete before lifecycle traffic
    begins. Fan-out iterates over a snapshot, and worker calls are
    made without holding the registry lock. Completion signals for
    stop_all_async() may arrive concurrently from any thread.

    ============================================================
    USAGE
    ============================================================

    ```python
    registry = WorkerRegistry()
    registry.register(WorkerEndpoint(id="orders"), factory)
    registry.register(WorkerEndpoint(id="audit"), factory)

    registry.start_all()
    ...
    registry.stop_all_async(lambda: print("all stopped"))
    ...
    registry.dispose_all()
    ```

    ============================================================
    """

    def __init__(self, config: Optional[RegistryConfig] = None) -> None:
        """
        Initialize registry.

        Args:
            config: Registry configuration
        """
        self._config = config or get_config()
        self._entries: Dict[str, RegisteredWorker] = {}
        self._phase: int = DEFAULT_PHASE
        self._state = RegistryState.EMPTY
        self._stop_generation = 0
        self._lock = threading.RLock()

        logger.debug(f"WorkerRegistry '{self.name}' initialized")

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def state(self) -> RegistryState:
        """Diagnostic lifecycle state; running-ness is always derived."""
        return self._state

    # --------------------------------------------------------
    # Lookup
    # --------------------------------------------------------

    def lookup(self, worker_id: str) -> Optional[ManagedWorker]:
        """
        Get the worker registered under an identifier.

        Raises:
            InvalidArgumentError: If worker_id is blank
        """
        _require_text(worker_id, "worker_id")
        with self._lock:
            entry = self._entries.get(worker_id)
        return entry.worker if entry else None

    def get_entry(self, worker_id: str) -> Optional[RegisteredWorker]:
        """Get the registry entry for an identifier."""
        _require_text(worker_id, "worker_id")
        with self._lock:
            return self._entries.get(worker_id)

    def list_all(self) -> List[ManagedWorker]:
        """Get all workers in registration order (a copy)."""
        return [entry.worker for entry in self._snapshot()]

    def get_worker_ids(self) -> List[str]:
        """Get all identifiers in registration order."""
        with self._lock:
            return list(self._entries)

    def _snapshot(self) -> List[RegisteredWorker]:
        with self._lock:
            return list(self._entries.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, worker_id: object) -> bool:
        with self._lock:
            return worker_id in self._entries

    # --------------------------------------------------------
    # Registration
    # --------------------------------------------------------

    def register(
        self,
        endpoint: Any,
        factory: WorkerFactory,
        start_immediately: bool = False,
    ) -> ManagedWorker:
        """
        Create a worker for an endpoint and register it.

        Args:
            endpoint: Descriptor exposing a non-blank ``id``
            factory: Factory used to build the worker
            start_immediately: Start the worker right away if the
                registry has already been started

        Returns:
            The registered worker

        Raises:
            InvalidArgumentError: Missing endpoint/factory or blank id
            RegistryDisposedError: Registry has been disposed
            DuplicateIdentifierError: Id already registered
            InitializationFailedError: Factory, initialize() or get_phase() failed
            PhaseConflictError: Custom phase differs from the registry's
        """
        if endpoint is None:
            raise InvalidArgumentError("endpoint", "must not be None")
        if factory is None:
            raise InvalidArgumentError("factory", "must not be None")
        if not callable(getattr(factory, "create_worker", None)):
            raise InvalidArgumentError("factory", "must provide create_worker()")

        worker_id = _require_text(getattr(endpoint, "id", None), "endpoint id")
        self._check_can_register(worker_id)

        worker = self._create_worker(worker_id, endpoint, factory)
        initializer, disposer = resolve_capabilities(worker)

        if initializer is not None:
            try:
                initializer()
            except Exception as e:
                raise InitializationFailedError(
                    worker_id=worker_id,
                    reason="Failed to initialize worker",
                    original_exception=e,
                ) from e

        try:
            worker_phase = self._read_phase(worker_id, worker)
            started = self._insert(worker_id, worker, worker_phase, initializer, disposer)
        except (InitializationFailedError, DuplicateIdentifierError,
                RegistryDisposedError, PhaseConflictError):
            self._discard_rejected(worker_id, disposer)
            raise

        logger.info(
            f"Registered worker: {worker_id} "
            f"(type={type(worker).__name__}, phase={self._format_phase(worker_phase)})"
        )

        if start_immediately and started and worker.is_auto_startup():
            logger.debug(f"Starting late-registered worker: {worker_id}")
            worker.start()

        return worker

    def _insert(
        self,
        worker_id: str,
        worker: ManagedWorker,
        worker_phase: int,
        initializer: Optional[Callable[[], None]],
        disposer: Optional[Callable[[], None]],
    ) -> bool:
        """Add a built worker; returns True if the registry is started."""
        with self._lock:
            # Re-checked: nothing may be mutated if either changed meanwhile
            self._check_can_register(worker_id)
            phase = self._resolve_phase(worker_id, worker_phase)

            self._entries[worker_id] = RegisteredWorker(
                worker_id=worker_id,
                worker=worker,
                phase=worker_phase,
                initializer=initializer,
                disposer=disposer,
            )
            self._phase = phase
            if self._state == RegistryState.EMPTY:
                self._state = RegistryState.POPULATED
            return self._state == RegistryState.STARTED

    def _read_phase(self, worker_id: str, worker: ManagedWorker) -> int:
        try:
            phase = worker.get_phase()
        except Exception as e:
            raise InitializationFailedError(
                worker_id=worker_id,
                reason="Failed to read worker phase",
                original_exception=e,
            ) from e
        if isinstance(phase, bool) or not isinstance(phase, int):
            raise InitializationFailedError(
                worker_id=worker_id,
                reason=f"get_phase() returned {type(phase).__name__}, expected int",
            )
        return phase

    def _discard_rejected(
        self,
        worker_id: str,
        disposer: Optional[Callable[[], None]],
    ) -> None:
        """Release a built worker that was not registered."""
        if disposer is None:
            return
        try:
            disposer()
            logger.debug(f"Disposed rejected worker: {worker_id}")
        except Exception as e:
            logger.warning(f"Failed to dispose rejected worker {worker_id}: {e}")

    def _check_can_register(self, worker_id: str) -> None:
        with self._lock:
            if not self._state.accepts_registration():
                raise RegistryDisposedError(self.name, worker_id)
            if worker_id in self._entries:
                raise DuplicateIdentifierError(worker_id)

    def _create_worker(
        self,
        worker_id: str,
        endpoint: Any,
        factory: WorkerFactory,
    ) -> ManagedWorker:
        try:
            worker = factory.create_worker(endpoint)
        except Exception as e:
            raise InitializationFailedError(
                worker_id=worker_id,
                reason=f"Factory {factory!r} failed to create worker",
                original_exception=e,
            ) from e

        if worker is None:
            raise InitializationFailedError(
                worker_id=worker_id,
                reason=f"Factory {factory!r} returned no worker",
            )
        return worker

    def _resolve_phase(self, worker_id: str, worker_phase: int) -> int:
        """Return the registry phase after admitting a worker phase."""
        if not is_custom_phase(worker_phase):
            return self._phase
        if is_custom_phase(self._phase) and self._phase != worker_phase:
            raise PhaseConflictError(
                worker_id=worker_id,
                registry_phase=self._phase,
                worker_phase=worker_phase,
            )
        return worker_phase

    @staticmethod
    def _format_phase(phase: int) -> str:
        return str(phase) if is_custom_phase(phase) else "default"

    # --------------------------------------------------------
    # Lifecycle
    # --------------------------------------------------------

    def start_all(self) -> None:
        """
        Start every auto-startup worker in registration order.

        The first start failure propagates and the remaining workers
        are not started. Already started workers are left running.
        """
        if self._state.is_terminal():
            logger.debug(f"Registry '{self.name}' is disposed, start ignored")
            return

        entries = self._snapshot()
        started = 0

        for entry in entries:
            if not entry.worker.is_auto_startup():
                logger.debug(f"Skipping worker without auto-startup: {entry.worker_id}")
                continue
            entry.worker.start()
            started += 1
            logger.debug(f"Started worker: {entry.worker_id}")

        self._transition(RegistryState.STARTED)
        logger.info(f"Registry '{self.name}' started {started}/{len(entries)} worker(s)")

    def stop_all(self) -> None:
        """
        Stop every worker in registration order, blocking.

        A failing worker is logged and the remaining workers are
        still stopped.
        """
        entries = self._snapshot()
        failed = 0

        for entry in entries:
            try:
                entry.worker.stop()
                logger.debug(f"Stopped worker: {entry.worker_id}")
            except Exception as e:
                failed += 1
                logger.error(f"Failed to stop worker {entry.worker_id}: {e}", exc_info=True)

        self._transition(RegistryState.STOPPED)
        logger.info(
            f"Registry '{self.name}' stopped {len(entries) - failed}/{len(entries)} worker(s)"
        )

    def stop_all_async(self, callback: Callable[[], None]) -> AggregatingCallback:
        """
        Ask every worker to stop, and invoke ``callback`` once all
        of them have signalled completion.

        Returns as soon as all stop requests have been issued. With no
        workers registered the callback runs before this returns.

        Args:
            callback: Zero-argument completion callback

        Returns:
            The aggregating callback; each worker receives its own
            WorkerCompletion view of it
        """
        if not callable(callback):
            raise InvalidArgumentError("callback", "must be callable")

        entries = self._snapshot()

        with self._lock:
            self._stop_generation += 1
            generation = self._stop_generation
        self._transition(RegistryState.STOPPING)

        def on_all_stopped() -> None:
            with self._lock:
                if self._state == RegistryState.STOPPING and self._stop_generation == generation:
                    self._state = RegistryState.STOPPED
            logger.info(f"Registry '{self.name}' stopped {len(entries)} worker(s)")
            callback()

        aggregator = AggregatingCallback(
            len(entries),
            on_all_stopped,
            strict=self._config.strict_completion_count,
        )

        for entry in entries:
            completion = WorkerCompletion(entry.worker_id, aggregator)
            try:
                entry.worker.stop(completion)
                logger.debug(f"Stop requested for worker: {entry.worker_id}")
            except Exception as e:
                logger.error(
                    f"Failed to request stop of worker {entry.worker_id}: {e}",
                    exc_info=True,
                )
                # A worker whose stop() raised is counted as stopped
                if completion.complete_if_silent():
                    logger.warning(
                        f"Signalled stop completion on behalf of worker {entry.worker_id}"
                    )

        return aggregator

    def is_running(self) -> bool:
        """Check if at least one worker is running."""
        return any(entry.worker.is_running() for entry in self._snapshot())

    def current_phase(self) -> int:
        """Get the shared phase (DEFAULT_PHASE if never customized)."""
        return self._phase

    def is_auto_startup(self) -> bool:
        """The registry itself is always eligible for automatic startup."""
        return True

    def dispose_all(self) -> None:
        """
        Dispose every worker in registration order.

        Never raises. A failing disposal is logged and disposal
        continues with the next worker. The mapping is discarded
        afterwards and the registry becomes DISPOSED.
        """
        with self._lock:
            if self._state.is_terminal():
                return
            entries = list(self._entries.values())
            self._state = RegistryState.DISPOSED

        failed = 0
        for entry in entries:
            if entry.disposer is None:
                continue
            try:
                entry.disposer()
            except Exception as e:
                failed += 1
                logger.warning(
                    f"Failed to dispose worker {entry.worker_id}: {e}",
                    exc_info=True,
                )

        with self._lock:
            self._entries.clear()

        logger.info(
            f"Registry '{self.name}' disposed {len(entries)} worker(s), {failed} failure(s)"
        )

    def _transition(self, state: RegistryState) -> None:
        with self._lock:
            if not self._state.is_terminal():
                self._state = state

    # --------------------------------------------------------
    # Lifecycle participant interface
    # --------------------------------------------------------

    def start(self) -> None:
        self.start_all()

    def stop(self, callback: Optional[Callable[[], None]] = None) -> None:
        if callback is None:
            self.stop_all()
        else:
            self.stop_all_async(callback)

    def get_phase(self) -> int:
        return self.current_phase()

    def dispose(self) -> None:
        self.dispose_all()

    # --------------------------------------------------------
    # Status
    # --------------------------------------------------------

    def get_status_summary(self) -> Dict[str, Any]:
        """Get summary of the registry and its workers."""
        entries = self._snapshot()
        return {
            "name": self.name,
            "state": self._state.value,
            "phase": self._phase if is_custom_phase(self._phase) else None,
            "total_registered": len(entries),
            "total_running": sum(1 for e in entries if e.worker.is_running()),
            "worker_ids": [e.worker_id for e in entries],
        }

    def __repr__(self) -> str:
        return (
            f"WorkerRegistry(name={self.name!r}, state={self._state.value}, "
            f"workers={len(self)})"
        )


# ============================================================
# EXPORTS
# ============================================================

__all__ = [
    "WorkerRegistry",
]
