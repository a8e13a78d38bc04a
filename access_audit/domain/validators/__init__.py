"""Domain validators. Pure validation functions."""

from access_audit.domain.validators.audit_validator import (
    build_audit_filter,
    parse_time_bound,
    validate_org_id,
    validate_reason_for_action,
)

__all__ = [
    "build_audit_filter",
    "parse_time_bound",
    "validate_org_id",
    "validate_reason_for_action",
]
