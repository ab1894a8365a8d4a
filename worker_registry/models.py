"""
Worker Registry - Data Models.

============================================================
CORE DATA STRUCTURES
============================================================

Defines the data models used by the lifecycle registry:
- DEFAULT_PHASE: Sentinel for "no custom phase"
- RegistryState: Lifecycle state of a registry instance
- WorkerEndpoint: Descriptor a worker is built from
- RegisteredWorker: One entry of the identifier -> worker mapping

============================================================
"""

import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional


# =============================================================
# CONSTANTS
# =============================================================


DEFAULT_PHASE: int = sys.maxsize
"""Sentinel phase: start last, stop first."""


def is_custom_phase(phase: int) -> bool:
    """Check if a phase value is a custom (non-sentinel) phase."""
    return phase < DEFAULT_PHASE


# =============================================================
# ENUMS
# =============================================================


class RegistryState(str, Enum):
    """
    Lifecycle state of a registry.

    EMPTY -> POPULATED -> STARTED -> STOPPING -> STOPPED -> DISPOSED

    DISPOSED is terminal. Running state is never read from here;
    it is always derived from the workers themselves.
    """
    EMPTY = "empty"
    POPULATED = "populated"
    STARTED = "started"
    STOPPING = "stopping"
    STOPPED = "stopped"
    DISPOSED = "disposed"

    def accepts_registration(self) -> bool:
        """Check if workers may still be registered."""
        return self != RegistryState.DISPOSED

    def is_terminal(self) -> bool:
        """Check if no further transitions are possible."""
        return self == RegistryState.DISPOSED


# =============================================================
# DATA CLASSES
# =============================================================


@dataclass(frozen=True)
class WorkerEndpoint:
    """
    Declarative description of a worker.

    The registry only reads ``id``; everything else is for the
    factory that turns the endpoint into a worker.
    """
    id: str
    source: Optional[str] = None  # queue, topic, stream...
    group: Optional[str] = None
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RegisteredWorker:
    """
    A single registry entry.

    Optional capabilities are resolved once at registration time
    and stored here instead of being probed on every call.
    """
    worker_id: str
    worker: Any
    phase: int = DEFAULT_PHASE
    initializer: Optional[Callable[[], None]] = None
    disposer: Optional[Callable[[], None]] = None
    registered_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def is_disposable(self) -> bool:
        """Check if the worker exposes a dispose capability."""
        return self.disposer is not None

    @property
    def has_custom_phase(self) -> bool:
        return is_custom_phase(self.phase)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "worker_id": self.worker_id,
            "worker_type": type(self.worker).__name__,
            "phase": self.phase if self.has_custom_phase else None,
            "disposable": self.is_disposable,
            "registered_at": self.registered_at.isoformat(),
        }


# =============================================================
# EXPORTS
# =============================================================

__all__ = [
    "DEFAULT_PHASE",
    "is_custom_phase",
    "RegistryState",
    "WorkerEndpoint",
    "RegisteredWorker",
]
