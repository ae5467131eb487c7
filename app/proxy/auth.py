from typing import Mapping, Optional

BEARER_PREFIX = "Bearer "


def normalize_bearer(value: Optional[str]) -> Optional[str]:
    """Return ``Bearer <token>`` for a raw or prefixed credential, or None if empty."""
    if not value or not value.strip():
        return None
    if value.startswith(BEARER_PREFIX):
        if not value[len(BEARER_PREFIX):].strip():
            return None
        return value
    return f"{BEARER_PREFIX}{value}"


def _header_value(headers: Mapping[str, str], name: str) -> Optional[str]:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def resolve_auth_token(
    headers: Mapping[str, str],
    cookies: Mapping[str, str],
    cookie_names: tuple[str, ...] = ("auth_token", "token"),
) -> Optional[str]:
    """
    Resolve the bearer credential for an inbound request.

    The Authorization header wins over cookies. Cookies are checked in the
    order given (primary name first, then the legacy alias).
    """
    token = normalize_bearer(_header_value(headers, "Authorization"))
    if token:
        return token

    for name in cookie_names:
        token = normalize_bearer(cookies.get(name))
        if token:
            return token
    return None
