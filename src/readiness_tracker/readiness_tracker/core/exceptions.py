from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is malformed or out of range."""


class NotFoundError(DomainError):
    """Raised when an id does not resolve, or resolves outside the caller's scope."""


class StateConflictError(DomainError):
    """Raised when a transition is attempted from the wrong state.

    Carries the current status (and record, when known) so the caller can reconcile.
    """

    def __init__(self, message: str, *, current_status: Optional[str] = None, current: Any = None):
        super().__init__(message)
        self.current_status = current_status
        self.current = current


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class DependencyFailure(DomainError):
    """A side effect (notification, audit, recompute) failed. Logged, never surfaced."""
