"""Validators for audit recording and query input. Pure functions, no infrastructure or DB access."""

from datetime import date, datetime
from typing import Optional, Union

from access_audit.domain.exceptions import (
    InvalidFilterError,
    InvalidTimeRangeError,
    ReasonActionMismatchError,
)
from access_audit.domain.models.query import AuditFilter
from access_audit.domain.reasons import ReasonCode, reason_matches_action


def validate_org_id(org_id: str) -> None:
    """Queries are always org-scoped. Raises InvalidFilterError if org_id is empty."""
    if not org_id or not org_id.strip():
        raise InvalidFilterError("orgId must not be empty")


def validate_reason_for_action(reason: int, action: bool) -> ReasonCode:
    """
    Check the reason code against the outcome (allowed <=> 1xx, denied <=> 2xx).
    Raises UnknownReasonCodeError or ReasonActionMismatchError.
    """
    code = ReasonCode.parse(reason)
    if not reason_matches_action(code, action):
        outcome = "allowed" if action else "denied"
        raise ReasonActionMismatchError(
            f"reason {int(code)} ({code.name}) does not match {outcome} decision"
        )
    return code


def parse_time_bound(name: str, value: Optional[str]) -> Union[datetime, date, None]:
    """
    Parse an ISO-8601 instant or a bare date. A bare date is returned as `date`
    so the caller can apply its own time-of-day default.
    """
    if value is None or not value.strip():
        return None
    text = value.strip()
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as e:
        raise InvalidTimeRangeError(f"{name} must be an ISO-8601 date or datetime, got {value!r}") from e


def _optional_text(value: Optional[str]) -> Optional[str]:
    return value or None


def build_audit_filter(
    *,
    org_id: str,
    action: Optional[bool] = None,
    auth_type: Optional[str] = None,
    resource_id: Optional[int] = None,
    location: Optional[str] = None,
    actor: Optional[str] = None,
) -> AuditFilter:
    """Validate raw filter values and build an AuditFilter. Empty strings mean "no filter"; other text matches exactly."""
    validate_org_id(org_id)
    if resource_id is not None and resource_id < 0:
        raise InvalidFilterError(f"resourceId must not be negative, got {resource_id}")
    return AuditFilter(
        org_id=org_id.strip(),
        action=action,
        auth_type=AuditFilter.parse_auth_type(auth_type),
        resource_id=resource_id,
        location=_optional_text(location),
        actor=_optional_text(actor),
    )
