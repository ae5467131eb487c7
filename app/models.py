from dataclasses import dataclass
from typing import Any, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

WRITE_METHODS = ("POST", "PUT", "PATCH")


@dataclass(frozen=True)
class ProxyRequest:
    """One outbound call to the backend, built once from the inbound request."""

    method: str
    path: str
    query_string: str = ""
    auth_token: Optional[str] = None
    body: Optional[bytes] = None

    @property
    def has_auth(self) -> bool:
        return self.auth_token is not None

    @property
    def sends_body(self) -> bool:
        return self.method.upper() in WRITE_METHODS and bool(self.body)

    def outbound_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.auth_token:
            headers["Authorization"] = self.auth_token
        return headers


class ProxyResponse(BaseModel):
    """Uniform envelope returned to the browser."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    http_status: int = Field(default=200, exclude=True)

    @classmethod
    def ok(cls, data: Any) -> "ProxyResponse":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, http_status: int) -> "ProxyResponse":
        return cls(success=False, error=error, http_status=http_status)

    def envelope(self) -> dict:
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error}

    def to_response(self) -> JSONResponse:
        return JSONResponse(content=self.envelope(), status_code=self.http_status)


class ContactRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    phone: Optional[str] = None
    units: Optional[Any] = None
    message: Optional[str] = None
