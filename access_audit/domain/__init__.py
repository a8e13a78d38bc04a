"""Domain layer: reason taxonomy, models, normalization, schemas, validators, exceptions. Pure logic only."""

from access_audit.domain.exceptions import (
    DomainError,
    DomainValidationError,
    InvalidFilterError,
    InvalidPageError,
    InvalidTimeRangeError,
    ReasonActionMismatchError,
    UnknownReasonCodeError,
)
from access_audit.domain.models import AuditEvent, Decision, RequestContext
from access_audit.domain.reasons import ReasonCode

__all__ = [
    "AuditEvent",
    "Decision",
    "DomainError",
    "DomainValidationError",
    "InvalidFilterError",
    "InvalidPageError",
    "InvalidTimeRangeError",
    "ReasonActionMismatchError",
    "ReasonCode",
    "RequestContext",
    "UnknownReasonCodeError",
]
