from typing import Any
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request

from app.contact.route import router as contact_router
from app.proxy import ProxyConfig, get_proxy_config, proxy_to_backend
from app.vars import API_BASE_PATH


router = APIRouter(prefix=API_BASE_PATH)
catch_all_router = APIRouter(prefix=API_BASE_PATH)

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def path_segment(value: str) -> str:
    """Re-encode a decoded path parameter so it stays one backend path segment."""
    return quote(value, safe="")


def raw_request_path(request: Request) -> str:
    raw_path = request.scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1")
    return quote(request.url.path)


def active_subscription(payload: Any) -> Any:
    """The backend lists subscriptions newest first; the browser wants one."""
    if isinstance(payload, dict):
        subscriptions = payload.get("subscriptions") or []
        if isinstance(subscriptions, list) and subscriptions:
            return subscriptions[0]
    return None


# Auth


@router.get("/auth/me")
async def auth_me(request: Request, config: ProxyConfig = Depends(get_proxy_config)):
    return await proxy_to_backend(request, "/api/auth/me/", config=config)


@router.post("/auth/forgot-password")
async def forgot_password(
    request: Request, config: ProxyConfig = Depends(get_proxy_config)
):
    return await proxy_to_backend(
        request, "/api/auth/forgot-password/", config=config, require_auth=False
    )


# Lease signing links are shared with tenants who have no account yet


@router.api_route("/leases/sign/{token}", methods=["GET", "POST"])
async def lease_signing(
    token: str, request: Request, config: ProxyConfig = Depends(get_proxy_config)
):
    return await proxy_to_backend(
        request,
        f"/api/leases/sign/{path_segment(token)}/",
        config=config,
        require_auth=False,
    )


@router.post("/leases/sign/{token}/verify-otp")
async def lease_signing_verify_otp(
    token: str, request: Request, config: ProxyConfig = Depends(get_proxy_config)
):
    return await proxy_to_backend(
        request,
        f"/api/leases/sign/{path_segment(token)}/verify-otp/",
        config=config,
        require_auth=False,
    )


# Maintenance and notifications


@router.api_route("/maintenance", methods=["GET", "POST"])
async def maintenance(request: Request, config: ProxyConfig = Depends(get_proxy_config)):
    return await proxy_to_backend(request, "/api/caretaker/maintenance/", config=config)


@router.get("/notifications")
async def list_notifications(
    request: Request, config: ProxyConfig = Depends(get_proxy_config)
):
    # Not every backend deployment ships notifications yet
    return await proxy_to_backend(
        request, "/api/notifications/", config=config, fallback_data=[]
    )


@router.post("/notifications")
async def mark_all_notifications_read(
    request: Request, config: ProxyConfig = Depends(get_proxy_config)
):
    return await proxy_to_backend(
        request, "/api/notifications/mark-all-read/", config=config
    )


@router.api_route("/notifications/{notification_id}/read", methods=["PATCH", "PUT"])
async def mark_notification_read(
    notification_id: str,
    request: Request,
    config: ProxyConfig = Depends(get_proxy_config),
):
    return await proxy_to_backend(
        request,
        f"/api/notifications/{path_segment(notification_id)}/read/",
        config=config,
    )


# Dashboards


@router.get("/owner/dashboard")
async def owner_dashboard(
    request: Request, config: ProxyConfig = Depends(get_proxy_config)
):
    return await proxy_to_backend(request, "/api/owner/dashboard/", config=config)


@router.get("/tenant/dashboard")
async def tenant_dashboard(
    request: Request, config: ProxyConfig = Depends(get_proxy_config)
):
    return await proxy_to_backend(request, "/api/tenant/dashboard", config=config)


# Payments


@router.post("/payments/initialize")
async def initialize_payment(
    request: Request, config: ProxyConfig = Depends(get_proxy_config)
):
    return await proxy_to_backend(
        request, "/api/payments/initiate", config=config, unwrap_response=False
    )


@router.post("/payments/verify")
async def verify_payment(request: Request, config: ProxyConfig = Depends(get_proxy_config)):
    return await proxy_to_backend(request, "/api/payments/verify/", config=config)


@router.get("/payments/subscription")
async def current_subscription(
    request: Request, config: ProxyConfig = Depends(get_proxy_config)
):
    return await proxy_to_backend(
        request,
        "/api/payments/subscriptions",
        config=config,
        unwrap_response=False,
        transform=active_subscription,
    )


# Properties and units. "/properties/units" must be registered before
# "/properties/{property_id}".


@router.api_route("/properties", methods=["GET", "POST"])
async def properties(request: Request, config: ProxyConfig = Depends(get_proxy_config)):
    return await proxy_to_backend(request, "/api/properties/", config=config)


@router.get("/properties/units")
async def all_units(request: Request, config: ProxyConfig = Depends(get_proxy_config)):
    return await proxy_to_backend(request, "/api/properties/units", config=config)


@router.api_route("/properties/units/{unit_id}", methods=["GET", "PUT", "DELETE"])
async def property_unit(
    unit_id: str, request: Request, config: ProxyConfig = Depends(get_proxy_config)
):
    return await proxy_to_backend(
        request, f"/api/properties/units/{path_segment(unit_id)}/", config=config
    )


@router.api_route("/properties/{property_id}", methods=["GET", "PUT", "DELETE"])
async def property_detail(
    property_id: str, request: Request, config: ProxyConfig = Depends(get_proxy_config)
):
    return await proxy_to_backend(
        request, f"/api/properties/{path_segment(property_id)}", config=config
    )


@router.api_route("/properties/{property_id}/units", methods=["GET", "POST"])
async def property_units(
    property_id: str, request: Request, config: ProxyConfig = Depends(get_proxy_config)
):
    return await proxy_to_backend(
        request, f"/api/properties/{path_segment(property_id)}/units/", config=config
    )


@router.api_route("/units/{unit_id}", methods=["GET", "PUT", "PATCH", "DELETE"])
async def unit_detail(
    unit_id: str, request: Request, config: ProxyConfig = Depends(get_proxy_config)
):
    return await proxy_to_backend(
        request, f"/api/properties/units/{path_segment(unit_id)}/", config=config
    )


# People


@router.api_route("/staff", methods=["GET", "POST"])
async def staff(request: Request, config: ProxyConfig = Depends(get_proxy_config)):
    return await proxy_to_backend(request, "/api/staff/", config=config)


@router.api_route("/staff/{staff_id}", methods=["GET", "PUT", "PATCH", "DELETE"])
async def staff_member(
    staff_id: str, request: Request, config: ProxyConfig = Depends(get_proxy_config)
):
    return await proxy_to_backend(
        request, f"/api/staff/{path_segment(staff_id)}/", config=config
    )


@router.api_route("/tenants", methods=["GET", "POST"])
async def tenants(request: Request, config: ProxyConfig = Depends(get_proxy_config)):
    return await proxy_to_backend(request, "/api/tenants/", config=config)


@router.api_route("/tenants/{tenant_id}", methods=["GET", "PUT", "DELETE"])
async def tenant_detail(
    tenant_id: str, request: Request, config: ProxyConfig = Depends(get_proxy_config)
):
    return await proxy_to_backend(
        request, f"/api/tenants/{path_segment(tenant_id)}/", config=config
    )


router.include_router(contact_router)


@catch_all_router.api_route("/{path:path}", methods=ALL_METHODS)
async def proxy_all(
    path: str, request: Request, config: ProxyConfig = Depends(get_proxy_config)
):
    """Everything without a dedicated handler goes to the same backend path."""
    return await proxy_to_backend(request, raw_request_path(request), config=config)
