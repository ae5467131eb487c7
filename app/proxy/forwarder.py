import logging
import re
from typing import Optional
from urllib.parse import urljoin

import httpx
from opentelemetry import trace

from app.models import ProxyRequest
from app.proxy.config import ProxyConfig

tracer = trace.get_tracer(__name__)
logger = logging.getLogger("uvicorn.error")

# Methods+body preserving redirects; other 3xx are returned as-is
REDIRECT_STATUSES = {307, 308}

_INSECURE_SCHEME = re.compile(r"^http://", re.IGNORECASE)


def create_backend_client(config: ProxyConfig) -> httpx.AsyncClient:
    """Client for a single proxied call. Redirects are handled manually."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.timeout),
        follow_redirects=False,
    )


def secure_redirect_location(location: str, request_url: str) -> str:
    """
    Upgrade an ``http://`` redirect target to ``https://``.

    The backend sits behind a TLS-terminating proxy that reports its own
    scheme as http in Location headers. Relative targets are resolved
    against the URL that produced the redirect.
    """
    location = urljoin(request_url, location.strip())
    return _INSECURE_SCHEME.sub("https://", location, count=1)


async def _send(
    client: httpx.AsyncClient,
    proxy_request: ProxyRequest,
    url: str,
    follow_redirects: bool = False,
) -> httpx.Response:
    return await client.request(
        method=proxy_request.method,
        url=url,
        headers=proxy_request.outbound_headers(),
        content=proxy_request.body if proxy_request.sends_body else None,
        follow_redirects=follow_redirects,
    )


async def forward_to_backend(
    client: httpx.AsyncClient,
    proxy_request: ProxyRequest,
    config: ProxyConfig,
) -> httpx.Response:
    """
    Send ``proxy_request`` to the backend and return the raw response.

    A 307/308 answer is re-sent with the same method, headers (including
    Authorization) and body to the secured Location. Only that first hop is
    handled manually; the re-sent request follows further redirects itself.
    Transport errors propagate to the caller.
    """
    url = config.backend_target(proxy_request.path, proxy_request.query_string)

    with tracer.start_as_current_span("backend_forward") as span:
        span.set_attribute("proxy.method", proxy_request.method)
        span.set_attribute("proxy.path", proxy_request.path)
        span.set_attribute("proxy.auth_present", proxy_request.has_auth)

        logger.info(
            f"[Proxy] {proxy_request.method} {proxy_request.path} - Auth: "
            f"{'Present' if proxy_request.has_auth else 'MISSING'}"
        )

        response = await _send(client, proxy_request, url)

        if response.status_code in REDIRECT_STATUSES:
            location: Optional[str] = response.headers.get("location")
            if location:
                redirect_url = secure_redirect_location(location, url)
                span.set_attribute("proxy.redirect_location", redirect_url)
                logger.info(f"[Proxy] Following redirect to: {redirect_url}")
                response = await _send(
                    client, proxy_request, redirect_url, follow_redirects=True
                )

        span.set_attribute("proxy.status_code", response.status_code)
        logger.info(
            f"[Proxy] {proxy_request.method} {proxy_request.path} - Status: {response.status_code}"
        )
        return response
