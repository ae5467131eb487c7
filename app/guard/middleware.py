"""
Page route guard.

Runs in front of every non-API path and

- normalizes legacy page routes (``/owner/dashboard`` -> ``/owner``),
- lets public pages through untouched,
- flags requests without a session cookie with ``x-auth-status: unverified``
  so the client-side auth context can take over,
- sends users whose role cookie does not match a role area to
  ``/unauthorized``. Admins may enter every role area.
"""

import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.proxy.config import ProxyConfig, get_proxy_config
from app.vars import API_BASE_PATH

logger = logging.getLogger("uvicorn.error")

ROLE_ROUTES = {
    "owner": ["/owner"],
    "agent": ["/agent"],
    "caretaker": ["/caretaker"],
    "tenant": ["/tenant"],
    "staff": ["/staff"],
    "admin": ["/admin"],
}
ADMIN_ROLE = "admin"

PUBLIC_ROUTES = [
    "/login",
    "/register",
    "/forgot-password",
    "/logout",
    "/contact",
    "/unauthorized",
    "/checkout",
    "/payment/success",
    "/payment/cancel",
    "/privacy",
    "/terms",
    "/cookies",
    "/sign",
    "/",
]

ROUTE_REDIRECTS = {
    "/owner/property": "/owner/properties",
    "/agent/property": "/agent/properties",
    "/caretaker/property": "/caretaker/properties",
    "/owner/dashboard": "/owner",
    "/agent/dashboard": "/agent",
    "/caretaker/dashboard": "/caretaker",
    "/tenant/dashboard": "/tenant",
}

UNAUTHORIZED_PAGE = "/unauthorized"

# Never guarded: API proxy, static assets and operational endpoints
UNGUARDED_PREFIXES = (
    API_BASE_PATH or "/api",
    "/_next/static",
    "/_next/image",
    "/favicon.ico",
    "/health",
    "/metrics",
)


def path_in_area(path: str, route: str) -> bool:
    """True when ``path`` is ``route`` or one of its sub-paths."""
    if route == "/":
        return path == "/"
    return path == route or path.startswith(route.rstrip("/") + "/")


def normalized_route(path: str, redirects: Optional[dict] = None) -> Optional[str]:
    for old_route, new_route in (redirects or ROUTE_REDIRECTS).items():
        if path_in_area(path, old_route):
            return new_route + path[len(old_route):]
    return None


def required_role(path: str) -> Optional[str]:
    for role, routes in ROLE_ROUTES.items():
        if any(path_in_area(path, route) for route in routes):
            return role
    return None


class RoleRouteGuardMiddleware(BaseHTTPMiddleware):
    """Role-based access control and legacy route normalization for pages."""

    def __init__(self, app, config: Optional[ProxyConfig] = None) -> None:
        super().__init__(app)
        self.config = config

    def _config(self, request: Request) -> ProxyConfig:
        if self.config is not None:
            return self.config
        # Same provider the route handlers depend on, overrides included
        provider = request.app.dependency_overrides.get(
            get_proxy_config, get_proxy_config
        )
        return provider()

    def _redirect(self, request: Request, path: str) -> RedirectResponse:
        return RedirectResponse(
            url=str(request.url.replace(path=path, query="")), status_code=307
        )

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if any(path_in_area(path, prefix) for prefix in UNGUARDED_PREFIXES):
            return await call_next(request)

        config = self._config(request)
        redirects = {**ROUTE_REDIRECTS, **dict(config.extra_route_redirects)}
        new_path = normalized_route(path, redirects)
        if new_path is not None:
            logger.debug(f"[Guard] Normalizing {path} -> {new_path}")
            return self._redirect(request, new_path)

        if any(path_in_area(path, route) for route in PUBLIC_ROUTES):
            return await call_next(request)

        if not request.cookies.get(config.auth_cookie_name):
            response = await call_next(request)
            response.headers["x-auth-status"] = "unverified"
            return response

        role = required_role(path)
        user_role = request.cookies.get(config.role_cookie_name)
        if role and user_role and user_role != role and user_role != ADMIN_ROLE:
            logger.info(f"[Guard] Role {user_role} denied access to {path}")
            return self._redirect(request, UNAUTHORIZED_PAGE)

        return await call_next(request)
