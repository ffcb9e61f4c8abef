"""Data models for Gateway Mirror.

Pydantic models for the HTTP surface and for reading the local cache."""

from .enums import GatewayStatus, SyncKind

from .gateway import Gateway, GatewayCreate, GatewayUpdate, ProxyRequest

from .cache import (
    CronJobRecord,
    MessageRecord,
    SessionRecord,
    SyncResult,
    UsageStatRecord,
)

__all__ = [
    # Enums
    "GatewayStatus",
    "SyncKind",
    # Gateway models
    "Gateway",
    "GatewayCreate",
    "GatewayUpdate",
    "ProxyRequest",
    # Cache models
    "SessionRecord",
    "CronJobRecord",
    "MessageRecord",
    "UsageStatRecord",
    "SyncResult",
]
