"""Application-layer exceptions. Do not reuse domain exceptions."""


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class StorageError(ApplicationError):
    """Raised by store adapters when a write or scan fails. Read paths are safe to retry."""


class QueryTimeoutError(ApplicationError):
    """Raised when a query or export exceeds its deadline. The scan is aborted without side effects."""
