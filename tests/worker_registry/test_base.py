"""
Tests for worker contracts and base classes.
"""

import pytest

from worker_registry import (
    DEFAULT_PHASE,
    BaseWorker,
    CallableWorkerFactory,
    ManagedWorker,
    WorkerEndpoint,
    WorkerFactory,
    resolve_capabilities,
)


# ============================================================
# TEST DOUBLES
# ============================================================

class CountingWorker(BaseWorker):
    def __init__(self, fail_stop: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.fail_stop = fail_stop
        self.starts = 0
        self.stops = 0

    def _do_start(self) -> None:
        self.starts += 1

    def _do_stop(self) -> None:
        self.stops += 1
        if self.fail_stop:
            raise RuntimeError("stuck")


class DisposableWorker(CountingWorker):
    def dispose(self) -> None:
        pass


# ============================================================
# BASE WORKER TESTS
# ============================================================

class TestBaseWorker:
    """Tests for BaseWorker defaults."""

    def test_defaults(self):
        worker = BaseWorker()

        assert worker.get_phase() == DEFAULT_PHASE
        assert worker.is_auto_startup()
        assert not worker.is_running()
        assert isinstance(worker, ManagedWorker)

    def test_start_is_idempotent(self):
        worker = CountingWorker()

        worker.start()
        worker.start()

        assert worker.is_running()
        assert worker.starts == 1

    def test_stop_without_callback(self):
        worker = CountingWorker()
        worker.start()

        worker.stop()

        assert not worker.is_running()
        assert worker.stops == 1

    def test_stop_when_not_running_still_signals(self):
        worker = CountingWorker()
        fired = []

        worker.stop(lambda: fired.append(True))

        assert fired == [True]
        assert worker.stops == 0

    def test_failed_stop_still_signals(self):
        worker = CountingWorker(fail_stop=True)
        worker.start()
        fired = []

        with pytest.raises(RuntimeError):
            worker.stop(lambda: fired.append(True))

        assert fired == [True]

    def test_custom_phase_and_auto_startup(self):
        worker = BaseWorker(auto_startup=False, phase=10)

        assert worker.get_phase() == 10
        assert not worker.is_auto_startup()


# ============================================================
# CAPABILITY / FACTORY TESTS
# ============================================================

class TestCapabilities:
    """Tests for optional capability detection and factories."""

    def test_resolve_without_optional_capabilities(self):
        assert resolve_capabilities(CountingWorker()) == (None, None)

    def test_resolve_dispose(self):
        worker = DisposableWorker()

        initializer, disposer = resolve_capabilities(worker)

        assert initializer is None
        assert disposer == worker.dispose

    def test_non_callable_attribute_is_not_a_capability(self):
        worker = CountingWorker()
        worker.dispose = "not a method"

        assert resolve_capabilities(worker) == (None, None)

    def test_callable_factory(self):
        factory = CallableWorkerFactory(lambda endpoint: CountingWorker(phase=len(endpoint.id)))

        worker = factory.create_worker(WorkerEndpoint(id="orders"))

        assert isinstance(factory, WorkerFactory)
        assert worker.get_phase() == 6
        assert "CallableWorkerFactory" in repr(factory)
