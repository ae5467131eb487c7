"""
Turns raw backend responses into the ``{success, data | error}`` envelope.

The backend is not consistent about content types, error fields or how many
times it wraps a payload in ``{"data": ...}``; everything here tolerates that.
"""

import json
import logging
from typing import Any, Callable, Optional

import httpx

from app.models import ProxyResponse

logger = logging.getLogger("uvicorn.error")

ERROR_FIELDS = ("detail", "message", "error")


def parse_backend_body(response: httpx.Response) -> Any:
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        return response.json()

    text = response.text
    try:
        return json.loads(text)
    except ValueError:
        return {"message": text}


def _stringify_error(value: Any) -> str:
    if isinstance(value, str):
        return value
    # FastAPI validation errors: [{"loc": [...], "msg": "...", "type": "..."}]
    if isinstance(value, list) and all(
        isinstance(item, dict) and "msg" in item for item in value
    ):
        return "; ".join(str(item["msg"]) for item in value)
    return json.dumps(value)


def extract_error_message(body: Any, status_code: int) -> str:
    if isinstance(body, dict):
        for field in ERROR_FIELDS:
            value = body.get(field)
            if value:
                return _stringify_error(value)
    return f"Request failed with status {status_code}"


def unwrap_payload(body: Any) -> Any:
    """Collapse ``{"data": {...}}`` / ``{"data": [...]}`` to the nested value."""
    if isinstance(body, dict):
        nested = body.get("data")
        if isinstance(nested, (dict, list)):
            return nested
    return body


def normalize_backend_response(
    response: httpx.Response,
    unwrap: bool = True,
    transform: Optional[Callable[[Any], Any]] = None,
) -> ProxyResponse:
    body = parse_backend_body(response)

    if not response.is_success:
        message = extract_error_message(body, response.status_code)
        logger.warning(f"[Proxy] Backend rejected request ({response.status_code}): {message}")
        return ProxyResponse.fail(message, response.status_code)

    payload = unwrap_payload(body) if unwrap else body
    if transform is not None:
        payload = transform(payload)
    return ProxyResponse.ok(payload)
