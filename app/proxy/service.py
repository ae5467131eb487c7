import logging
from typing import Any, Callable, Optional

import httpx
from fastapi import Request
from fastapi.responses import JSONResponse

from app.models import ProxyRequest, ProxyResponse, WRITE_METHODS
from app.proxy import forwarder
from app.proxy.auth import resolve_auth_token
from app.proxy.config import ProxyConfig, get_proxy_config
from app.proxy.normalizer import normalize_backend_response
from app.utils import token_fingerprint
from app.utils.exception_logging import format_exception_message, log_exception_with_details

logger = logging.getLogger("uvicorn.error")

UNAUTHORIZED = "Unauthorized"
NO_FALLBACK = object()


async def build_proxy_request(
    request: Request,
    backend_path: str,
    config: ProxyConfig,
    method: Optional[str] = None,
) -> ProxyRequest:
    method = (method or request.method).upper()
    body = None
    if method in WRITE_METHODS:
        body = await request.body() or None
    auth_token = resolve_auth_token(
        request.headers,
        request.cookies,
        (config.auth_cookie_name, config.legacy_cookie_name),
    )
    logger.debug(f"[Proxy] {method} {backend_path} credential: {token_fingerprint(auth_token)}")
    return ProxyRequest(
        method=method,
        path=backend_path,
        query_string=request.url.query,
        auth_token=auth_token,
        body=body,
    )


async def execute_proxy_request(
    proxy_request: ProxyRequest,
    config: ProxyConfig,
    unwrap_response: bool = True,
    transform: Optional[Callable[[Any], Any]] = None,
    fallback_data: Any = NO_FALLBACK,
) -> ProxyResponse:
    """Forward, then normalize. Never raises: failures become a 500 envelope."""
    try:
        async with forwarder.create_backend_client(config) as client:
            response = await forwarder.forward_to_backend(client, proxy_request, config)
            if response.status_code == 404 and fallback_data is not NO_FALLBACK:
                logger.info(f"[Proxy] {proxy_request.path} not found, using fallback data")
                return ProxyResponse.ok(fallback_data)
            return normalize_backend_response(
                response, unwrap=unwrap_response, transform=transform
            )
    except httpx.TransportError as e:
        log_exception_with_details(
            logger, f"[Proxy] Backend unreachable for {proxy_request.method} {proxy_request.path}", e
        )
        if fallback_data is not NO_FALLBACK:
            return ProxyResponse.ok(fallback_data)
        return ProxyResponse.fail(format_exception_message(e) or "Internal server error", 500)
    except Exception as e:
        log_exception_with_details(
            logger, f"[Proxy] Error for {proxy_request.method} {proxy_request.path}", e
        )
        return ProxyResponse.fail(format_exception_message(e) or "Internal server error", 500)


async def proxy_to_backend(
    request: Request,
    backend_path: str,
    *,
    config: Optional[ProxyConfig] = None,
    require_auth: bool = True,
    unwrap_response: bool = True,
    method: Optional[str] = None,
    transform: Optional[Callable[[Any], Any]] = None,
    fallback_data: Any = NO_FALLBACK,
) -> JSONResponse:
    """
    Proxy ``request`` to ``backend_path`` on the backend and return the envelope.

    Args:
        request: The inbound browser request
        backend_path: Backend path, e.g. "/api/properties/"
        config: Injected proxy settings, defaults to the process-wide config
        require_auth: Answer 401 without calling the backend when no token
        unwrap_response: Collapse a nested ``{"data": ...}`` payload
        method: Override the inbound HTTP method
        transform: Applied to the payload of a successful response
        fallback_data: Served as a success payload on backend 404 or outage
    """
    config = config or get_proxy_config()
    try:
        proxy_request = await build_proxy_request(request, backend_path, config, method)
    except Exception as e:
        log_exception_with_details(logger, f"[Proxy] Could not read request for {backend_path}", e)
        return ProxyResponse.fail(format_exception_message(e) or "Internal server error", 500).to_response()

    if require_auth and not proxy_request.has_auth:
        logger.warning(f"[Proxy] {proxy_request.method} {backend_path} rejected: no token")
        return ProxyResponse.fail(UNAUTHORIZED, 401).to_response()

    result = await execute_proxy_request(
        proxy_request,
        config,
        unwrap_response=unwrap_response,
        transform=transform,
        fallback_data=fallback_data,
    )
    return result.to_response()
