"""Gateway registration models for Gateway Mirror."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import GatewayStatus


def _validate_url(v: str) -> str:
    if not v.startswith(("http://", "https://")):
        raise ValueError("url must start with http:// or https://")
    return v.rstrip("/")


class GatewayCreate(BaseModel):
    """Payload for registering a gateway."""

    name: str = Field(..., min_length=1, description="Display name")
    url: str = Field(..., min_length=1, description="Gateway base URL")
    token: str = Field(..., min_length=1, description="Bearer token")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensure the gateway URL is absolute and has no trailing slash."""
        return _validate_url(v)


class GatewayUpdate(BaseModel):
    """Partial update of a gateway; only the provided fields change."""

    name: Optional[str] = Field(default=None, min_length=1)
    url: Optional[str] = Field(default=None, min_length=1)
    token: Optional[str] = Field(default=None, min_length=1)
    status: Optional[GatewayStatus] = Field(
        default=None, description="Administrative status override"
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _validate_url(v)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True, mode="json")


class Gateway(BaseModel):
    """Registered gateway as stored in the cache."""

    id: str
    name: str
    url: str
    token: str
    status: GatewayStatus = GatewayStatus.UNKNOWN
    last_seen_at: Optional[int] = None
    created_at: int
    updated_at: int

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class ProxyRequest(BaseModel):
    """Request forwarded verbatim to a gateway."""

    endpoint: str = Field(..., min_length=1, description="Path on the gateway, e.g. /status")
    method: str = Field(default="GET")
    body: Optional[Any] = None

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        return v if v.startswith("/") else f"/{v}"

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        method = v.upper()
        if method not in ("GET", "POST", "PUT", "PATCH", "DELETE"):
            raise ValueError(f"unsupported method: {v}")
        return method
