"""
Worker Registry - Exceptions.

============================================================
CUSTOM EXCEPTIONS
============================================================

All exceptions for the lifecycle registry:
- WorkerRegistryError: Base exception
- InvalidArgumentError: Blank id, missing endpoint/factory/callback
- DuplicateIdentifierError: Id already registered
- InitializationFailedError: Worker could not be built or initialized
- PhaseConflictError: Workers disagree on a custom phase
- RegistryDisposedError: Registration after disposal
- CompletionOverflowError: More completion signals than expected
- ConfigurationError: Invalid configuration

============================================================
FAILURE SAFETY
============================================================

Registration errors are raised before any state is mutated.
Disposal never raises; its failures are logged per worker.

============================================================
"""

from typing import Any, Dict, Optional


class WorkerRegistryError(Exception):
    """
    Base exception for worker registry errors.

    All registry exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        worker_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize exception.

        Args:
            message: Error message
            worker_id: Identifier of the affected worker
            details: Additional error details
        """
        self.message = message
        self.worker_id = worker_id
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message."""
        if self.worker_id:
            return f"[{self.worker_id}] {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "worker_id": self.worker_id,
            "details": self.details,
        }


class InvalidArgumentError(WorkerRegistryError, ValueError):
    """
    Raised when a required argument is missing or blank.

    Caller bug; nothing has been mutated.
    """

    def __init__(
        self,
        argument: str,
        reason: str,
        worker_id: Optional[str] = None,
    ) -> None:
        """
        Initialize exception.

        Args:
            argument: Name of the offending argument
            reason: What is wrong with it
            worker_id: Identifier involved, if any
        """
        super().__init__(
            message=f"Invalid {argument}: {reason}",
            worker_id=worker_id,
            details={"argument": argument, "reason": reason},
        )
        self.argument = argument


class DuplicateIdentifierError(WorkerRegistryError):
    """Raised when an identifier is already registered."""

    def __init__(self, worker_id: str) -> None:
        super().__init__(
            message=f"Another endpoint is already registered with id '{worker_id}'",
            worker_id=worker_id,
        )


class InitializationFailedError(WorkerRegistryError):
    """
    Raised when a worker cannot be created or initialized.

    Wraps the underlying exception; the registry is left untouched.
    """

    def __init__(
        self,
        worker_id: str,
        reason: str,
        original_exception: Optional[BaseException] = None,
    ) -> None:
        """
        Initialize exception.

        Args:
            worker_id: Identifier of the worker being registered
            reason: Why initialization failed
            original_exception: The underlying exception
        """
        details = {"reason": reason}
        if original_exception is not None:
            details["original_exception"] = str(original_exception)
            details["exception_type"] = type(original_exception).__name__

        super().__init__(
            message=f"Failed to initialize worker: {reason}",
            worker_id=worker_id,
            details=details,
        )
        self.original_exception = original_exception


class PhaseConflictError(WorkerRegistryError):
    """
    Raised when a worker reports a custom phase that differs from the
    one already adopted by the registry.
    """

    def __init__(
        self,
        worker_id: str,
        registry_phase: int,
        worker_phase: int,
    ) -> None:
        super().__init__(
            message=(
                "Encountered phase mismatch between worker definitions: "
                f"{registry_phase} vs {worker_phase}"
            ),
            worker_id=worker_id,
            details={
                "registry_phase": registry_phase,
                "worker_phase": worker_phase,
            },
        )
        self.registry_phase = registry_phase
        self.worker_phase = worker_phase


class RegistryDisposedError(WorkerRegistryError):
    """Raised when registering into a registry that has been disposed."""

    def __init__(self, registry_name: str, worker_id: Optional[str] = None) -> None:
        super().__init__(
            message=f"Registry '{registry_name}' has been disposed",
            worker_id=worker_id,
            details={"registry": registry_name},
        )


class CompletionOverflowError(WorkerRegistryError):
    """
    Raised when an aggregating callback receives more signals than
    it was created for.

    Always a caller contract violation.
    """

    def __init__(self, expected: int) -> None:
        super().__init__(
            message=f"Completion signalled more than {expected} time(s)",
            details={"expected": expected},
        )
        self.expected = expected


class ConfigurationError(WorkerRegistryError):
    """
    Raised when configuration is invalid.

    Should be caught at startup.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Optional[str] = None,
    ) -> None:
        details = {}
        if config_key:
            details["config_key"] = config_key
        if actual_value is not None:
            details["actual"] = actual_value

        super().__init__(message=message, details=details)
