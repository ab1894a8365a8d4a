"""
Worker Registry Package - Lifecycle Coordination for Managed Workers.

============================================================
PACKAGE OVERVIEW
============================================================
Owns a set of independently running workers (queue consumers,
stream readers, pollers...) and coordinates their lifecycle as a
single unit inside a larger application's startup/shutdown.

============================================================
CORE PRINCIPLES
============================================================
1. The registry does not implement workers, it only coordinates them
2. Registration order is the order of every fan-out
3. Registration failures never leave a partial entry behind
4. All workers of one registry share at most one custom phase
5. Disposal is best-effort and reaches every worker

============================================================
ARCHITECTURE
============================================================

    +-----------------------------------------------------+
    |                   WorkerRegistry                    |
    |-----------------------------------------------------|
    |  register        |  factory -> initialize -> phase  |
    |  start_all       |  ordered, fail-fast              |
    |  stop_all        |  ordered, per-worker isolation   |
    |  stop_all_async  |  AggregatingCallback fan-in      |
    |  dispose_all     |  ordered, never raises           |
    +-----------------------------------------------------+

============================================================
USAGE
============================================================

```python
from worker_registry import (
    BaseWorker,
    CallableWorkerFactory,
    WorkerEndpoint,
    WorkerRegistry,
)

class QueueConsumer(BaseWorker):
    def __init__(self, endpoint):
        super().__init__()
        self.queue = endpoint.source

factory = CallableWorkerFactory(QueueConsumer)

registry = WorkerRegistry()
registry.register(WorkerEndpoint(id="orders", source="orders.q"), factory)
registry.register(WorkerEndpoint(id="audit", source="audit.q"), factory)

registry.start_all()
registry.stop_all_async(lambda: print("all workers stopped"))
registry.dispose_all()
```

============================================================
"""

from .models import (
    DEFAULT_PHASE,
    is_custom_phase,
    RegistryState,
    WorkerEndpoint,
    RegisteredWorker,
)
from .config import (
    RegistryConfig,
    get_config,
    set_config,
)
from .exceptions import (
    WorkerRegistryError,
    InvalidArgumentError,
    DuplicateIdentifierError,
    InitializationFailedError,
    PhaseConflictError,
    RegistryDisposedError,
    CompletionOverflowError,
    ConfigurationError,
)
from .base import (
    CompletionCallback,
    ManagedWorker,
    WorkerFactory,
    BaseWorker,
    CallableWorkerFactory,
    resolve_capabilities,
)
from .callbacks import AggregatingCallback, WorkerCompletion
from .registry import WorkerRegistry
from .logging_utils import setup_logging, setup_logging_from_config


__all__ = [
    # Models
    "DEFAULT_PHASE",
    "is_custom_phase",
    "RegistryState",
    "WorkerEndpoint",
    "RegisteredWorker",
    # Config
    "RegistryConfig",
    "get_config",
    "set_config",
    # Exceptions
    "WorkerRegistryError",
    "InvalidArgumentError",
    "DuplicateIdentifierError",
    "InitializationFailedError",
    "PhaseConflictError",
    "RegistryDisposedError",
    "CompletionOverflowError",
    "ConfigurationError",
    # Contracts
    "CompletionCallback",
    "ManagedWorker",
    "WorkerFactory",
    "BaseWorker",
    "CallableWorkerFactory",
    "resolve_capabilities",
    # Core
    "AggregatingCallback",
    "WorkerCompletion",
    "WorkerRegistry",
    # Logging
    "setup_logging",
    "setup_logging_from_config",
]
