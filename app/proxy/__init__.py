from .auth import resolve_auth_token
from .config import ProxyConfig, get_proxy_config
from .service import NO_FALLBACK, proxy_to_backend

__all__ = [
    "NO_FALLBACK",
    "ProxyConfig",
    "get_proxy_config",
    "proxy_to_backend",
    "resolve_auth_token",
]
