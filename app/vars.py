import os

SERVICE_NAME = os.getenv("SERVICE_NAME", "propertech-web-proxy")

DEFAULT_BACKEND_URL = "https://api.propertechsoftware.com"
BACKEND_URL = (
    os.environ.get("BACKEND_URL")
    or os.environ.get("NEXT_PUBLIC_API_URL")
    or DEFAULT_BACKEND_URL
).rstrip("/")
API_BASE_PATH = os.environ.get("API_BASE_PATH", "/api").rstrip("/")
PROXY_TIMEOUT = float(os.environ.get("PROXY_TIMEOUT", "30"))

AUTH_COOKIE_NAME = os.environ.get("AUTH_COOKIE_NAME", "auth_token")
AUTH_LEGACY_COOKIE_NAME = os.environ.get("AUTH_LEGACY_COOKIE_NAME", "token")
USER_ROLE_COOKIE_NAME = os.environ.get("USER_ROLE_COOKIE_NAME", "user_role")

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")


def _parse_route_map(raw: str) -> dict:
    mapping: dict = {}
    if not raw:
        return mapping
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        if "=" in entry:
            key, val = entry.split("=", 1)
            key = key.strip()
            val = val.strip()
            if key and val:
                mapping[key] = val
    return mapping


# Extra legacy page routes to normalize, e.g. "/owner/old=/owner/new,/a=/b"
EXTRA_ROUTE_REDIRECTS = _parse_route_map(os.getenv("EXTRA_ROUTE_REDIRECTS", ""))
