from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from app import vars as env


@dataclass(frozen=True)
class ProxyConfig:
    """Process-wide proxy settings, resolved once and injected into handlers."""

    backend_url: str
    timeout: float = 30.0
    auth_cookie_name: str = "auth_token"
    legacy_cookie_name: str = "token"
    role_cookie_name: str = "user_role"
    # (old page route, new page route) pairs added to the built-in ones
    extra_route_redirects: Tuple[Tuple[str, str], ...] = ()

    def backend_target(self, path: str, query_string: str = "") -> str:
        if not path.startswith("/"):
            path = "/" + path
        url = f"{self.backend_url.rstrip('/')}{path}"
        if query_string:
            url = f"{url}?{query_string}"
        return url


@lru_cache(maxsize=1)
def get_proxy_config() -> ProxyConfig:
    return ProxyConfig(
        backend_url=env.BACKEND_URL,
        timeout=env.PROXY_TIMEOUT,
        auth_cookie_name=env.AUTH_COOKIE_NAME,
        legacy_cookie_name=env.AUTH_LEGACY_COOKIE_NAME,
        role_cookie_name=env.USER_ROLE_COOKIE_NAME,
        extra_route_redirects=tuple(env.EXTRA_ROUTE_REDIRECTS.items()),
    )
