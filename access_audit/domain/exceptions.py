"""Domain-specific exceptions. Pure domain layer; no infrastructure."""


class DomainError(Exception):
    """Base for all domain-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DomainValidationError(DomainError):
    """Raised when caller input violates query rules. Never reaches the store."""


class InvalidTimeRangeError(DomainValidationError):
    """Raised when a time bound is malformed or start is after end."""


class InvalidFilterError(DomainValidationError):
    """Raised when a filter value is malformed (e.g. unknown auth type)."""


class InvalidPageError(DomainValidationError):
    """Raised when limit/offset are out of bounds."""


class UnknownReasonCodeError(DomainError):
    """Raised when a reason code is not part of the taxonomy."""


class ReasonActionMismatchError(DomainError):
    """Reason code prefix disagrees with the decision outcome (1xx must be allowed, 2xx denied)."""
