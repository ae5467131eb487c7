import json
import logging
import re
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.models import ContactRequest, ProxyRequest, ProxyResponse
from app.proxy import forwarder
from app.proxy.config import ProxyConfig, get_proxy_config
from app.utils.exception_logging import log_exception_with_details

router = APIRouter()
logger = logging.getLogger("uvicorn.error")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
SENT_MESSAGE = "Message sent successfully"
REQUIRED_FIELDS = "Name, email, and message are required"
INVALID_EMAIL = "Invalid email address"


def validate_contact(contact: ContactRequest) -> Optional[str]:
    """Return an error message for an unusable submission, None when valid."""
    if not contact.name or not contact.email or not contact.message:
        return REQUIRED_FIELDS
    if not EMAIL_PATTERN.fullmatch(contact.email):
        return INVALID_EMAIL
    return None


def validation_error_message(error: ValidationError) -> str:
    """Map a type error on a submitted field to the matching 400 message."""
    fields = {err["loc"][0] for err in error.errors() if err["loc"]}
    if fields == {"email"}:
        return INVALID_EMAIL
    return REQUIRED_FIELDS


async def relay_contact(contact: ContactRequest, config: ProxyConfig) -> bool:
    """Send the submission to the backend. Failures are logged, never raised."""
    proxy_request = ProxyRequest(
        method="POST",
        path="/api/contact",
        body=json.dumps(contact.model_dump()).encode("utf-8"),
    )
    try:
        async with forwarder.create_backend_client(config) as client:
            response = await forwarder.forward_to_backend(client, proxy_request, config)
    except httpx.HTTPError as e:
        log_exception_with_details(logger, "[Contact] Backend contact API unreachable", e, logging.WARNING)
        return False

    if not response.is_success:
        logger.error(
            f"[Contact] Backend contact API error ({response.status_code}): {response.text}"
        )
        return False
    return True


@router.post("/contact")
async def submit_contact(request: Request, config: ProxyConfig = Depends(get_proxy_config)):
    try:
        payload = await request.json()
    except ValueError as e:
        log_exception_with_details(logger, "[Contact] Unreadable submission", e)
        return ProxyResponse.fail("Server error", 500).to_response()

    try:
        contact = ContactRequest.model_validate(payload if isinstance(payload, dict) else {})
    except ValidationError as e:
        logger.info(f"[Contact] Rejected submission: {e.error_count()} invalid field(s)")
        return ProxyResponse.fail(validation_error_message(e), 400).to_response()

    error = validate_contact(contact)
    if error:
        return ProxyResponse.fail(error, 400).to_response()

    if not await relay_contact(contact, config):
        # The visitor still gets a confirmation; the submission is in the logs
        logger.info(f"[Contact] Submission kept in logs: {contact.model_dump()}")

    return JSONResponse(content=ProxyResponse.ok({"message": SENT_MESSAGE}).envelope())
