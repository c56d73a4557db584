"""Domain exception hierarchy.

Services raise these; the API layer renders them through the handlers in
core/exceptions.py. Each class carries a stable ``code`` for clients and the
HTTP status it maps to.

Usage:
    from src.crm.core.errors import NotFoundError, InvalidStateError

    raise NotFoundError(resource="Process", resource_id=process_id)
    raise InvalidStateError("Process is already closed")
"""

from typing import Any
from uuid import UUID


class DomainError(Exception):
    """Base class for every error the process engine surfaces to callers."""

    code: str = "domain_error"
    status_code: int = 400
    retryable: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidInputError(DomainError):
    """Malformed body, out-of-range score, or missing required field."""

    code = "invalid_input"
    status_code = 400


class UnauthenticatedError(DomainError):
    """No actor identity could be resolved from the request."""

    code = "unauthenticated"
    status_code = 401


class NotFoundError(DomainError):
    """Raised when a process or a referenced phase does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Process", "Phase").
        resource_id: The identifier that was looked up.
    """

    code = "not_found"
    status_code = 404

    def __init__(self, resource: str, resource_id: UUID | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" {resource_id}"
        msg += " not found"
        super().__init__(msg)


class InvalidStateError(DomainError):
    """The process is not in a state that allows the requested change."""

    code = "invalid_state"
    status_code = 400


class RequiresFinalizationError(InvalidStateError):
    """The requested target phase is terminal; use the finalize operation."""

    code = "requires_finalization"
    status_code = 409


class ConflictError(DomainError):
    """The request conflicts with stored state or catalog configuration."""

    code = "conflict"
    status_code = 409


class NoTerminalPhaseError(ConflictError):
    """No active terminal phase is configured for a process type.

    Not retryable: an administrator has to configure the catalog first.
    """

    code = "no_terminal_phase"

    def __init__(self, process_type: str) -> None:
        self.process_type = process_type
        super().__init__(f"No terminal phase configured for process type '{process_type}'")


class ConcurrentModificationError(ConflictError):
    """The process changed between read and conditional write."""

    code = "concurrent_modification"

    def __init__(self, process_id: UUID) -> None:
        self.process_id = process_id
        super().__init__(f"Process {process_id} was modified concurrently, reload and retry")


class InfrastructureError(DomainError):
    """The backing store failed. The only error class callers may retry."""

    code = "infrastructure"
    status_code = 503
    retryable = True
