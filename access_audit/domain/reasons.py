"""Decision reason taxonomy. Immutable reference data, grouped by hundreds: 1xx allowed, 2xx denied."""

from enum import IntEnum
from typing import Dict

from access_audit.domain.exceptions import UnknownReasonCodeError


class ReasonCode(IntEnum):
    """Why the gateway allowed or denied a request."""

    ALLOWED_BY_RULE = 100
    ALLOWED_NO_AUTH = 101
    VALID_ACCESS_TOKEN = 102
    VALID_HEADER_AUTH = 103
    VALID_PINCODE = 104
    VALID_PASSWORD = 105
    VALID_EMAIL = 106
    VALID_SSO = 107

    RESOURCE_NOT_FOUND = 201
    RESOURCE_BLOCKED = 202
    DROPPED_BY_RULE = 203
    NO_SESSIONS = 204
    TEMPORARY_REQUEST_TOKEN = 205
    NO_MORE_AUTH_METHODS = 299

    @classmethod
    def parse(cls, value: int) -> "ReasonCode":
        """Return the enum member for value. Raises UnknownReasonCodeError if not in the taxonomy."""
        try:
            return cls(int(value))
        except (TypeError, ValueError) as e:
            raise UnknownReasonCodeError(f"Unknown reason code: {value!r}") from e


_REASON_LABELS: Dict[ReasonCode, str] = {
    ReasonCode.ALLOWED_BY_RULE: "Allowed by Rule",
    ReasonCode.ALLOWED_NO_AUTH: "Allowed No Auth",
    ReasonCode.VALID_ACCESS_TOKEN: "Valid Access Token",
    ReasonCode.VALID_HEADER_AUTH: "Valid Header Auth",
    ReasonCode.VALID_PINCODE: "Valid Pincode",
    ReasonCode.VALID_PASSWORD: "Valid Password",
    ReasonCode.VALID_EMAIL: "Valid Email",
    ReasonCode.VALID_SSO: "Valid SSO",
    ReasonCode.RESOURCE_NOT_FOUND: "Resource Not Found",
    ReasonCode.RESOURCE_BLOCKED: "Resource Blocked",
    ReasonCode.DROPPED_BY_RULE: "Dropped by Rule",
    ReasonCode.NO_SESSIONS: "No Sessions",
    ReasonCode.TEMPORARY_REQUEST_TOKEN: "Temporary Request Token",
    ReasonCode.NO_MORE_AUTH_METHODS: "No More Auth Methods",
}


def is_allow_reason(code: int) -> bool:
    return ReasonCode.parse(code) // 100 == 1


def is_deny_reason(code: int) -> bool:
    return ReasonCode.parse(code) // 100 == 2


def reason_matches_action(code: int, action: bool) -> bool:
    """True when the code's prefix agrees with the outcome: allowed <=> 1xx, denied <=> 2xx."""
    return is_allow_reason(code) if action else is_deny_reason(code)


def describe_reason(code: int) -> str:
    """Human label for a reason code; unknown codes render as their number."""
    try:
        return _REASON_LABELS[ReasonCode.parse(code)]
    except UnknownReasonCodeError:
        return str(code)
