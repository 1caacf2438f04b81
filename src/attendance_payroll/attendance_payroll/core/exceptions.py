class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class InsufficientBalanceError(DomainError):
    """Raised when a leave reservation exceeds the available balance."""

    def __init__(self, requested, available):
        super().__init__(f"Insufficient leave balance. Available: {available} days, Requested: {requested} days")
        self.requested = requested
        self.available = available


class InvalidStateError(DomainError):
    """Raised on a leave transition that the current state does not allow."""


class ConcurrencyConflictError(DomainError):
    """Raised when an optimistic write lost the race. Retry with fresh data."""


class InvariantViolationError(RuntimeError):
    """Ledger identity broken. This is a bug, not a business error."""
