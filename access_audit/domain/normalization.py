"""Actor and network normalization. Pure functions, no infrastructure."""

from typing import Any, Optional

from access_audit.domain.models.audit_event import ActorIdentity, ApiKeyActor, UserActor
from access_audit.domain.models.query import AuthMethodType

AUTH_TYPE_METADATA_KEY = "type"


def resolve_actor(
    user: Optional[UserActor],
    api_key: Optional[ApiKeyActor],
) -> Optional[ActorIdentity]:
    """
    Pick the single actor for a decision. User is evaluated first and an API key
    overwrites it: a key-authenticated request is attributed to the key.
    """
    actor: Optional[ActorIdentity] = None
    if user is not None:
        actor = user
    if api_key is not None:
        actor = api_key
    return actor


def normalize_client_ip(raw: Optional[str]) -> Optional[str]:
    """
    Strip port (and brackets) from a raw client address.

    "[2001:db8::1]:443" -> "2001:db8::1"
    "203.0.113.5:51820" -> "203.0.113.5"
    "no-colon-here"     -> "no-colon-here"

    The bracket check runs first because IPv6 literals contain colons.
    """
    if not raw:
        return None
    if raw.startswith("[") and "]" in raw:
        return raw[1:raw.index("]")]
    host, sep, _port = raw.rpartition(":")
    if not sep:
        return raw
    return host


def derive_auth_type(metadata: Any) -> Optional[str]:
    """Auth-method subtype for the `type` filter, read from metadata["type"] when it is a known value."""
    if not isinstance(metadata, dict):
        return None
    value = metadata.get(AUTH_TYPE_METADATA_KEY)
    if not isinstance(value, str):
        return None
    try:
        return AuthMethodType(value).value
    except ValueError:
        return None
