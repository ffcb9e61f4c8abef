"""Service layer for Gateway Mirror."""

from .cache_reader import CacheReader
from .errors import (
    GatewayNotFound,
    GatewaySyncError,
    ReconcileStorageFailure,
    RemoteCallFailed,
    RemoteError,
    RemoteProtocolError,
    RemoteUnreachable,
)
from .gateway_client import GatewayClient
from .gateway_registry import GatewayRegistry
from .health_tracker import HealthTracker
from .reconcilers import (
    CronJobReconciler,
    MessageReconciler,
    SessionReconciler,
    UsageReconciler,
)
from .sync_orchestrator import SyncOrchestrator

__all__ = [
    "CacheReader",
    "GatewayClient",
    "GatewayRegistry",
    "HealthTracker",
    "SessionReconciler",
    "CronJobReconciler",
    "MessageReconciler",
    "UsageReconciler",
    "SyncOrchestrator",
    "GatewaySyncError",
    "GatewayNotFound",
    "RemoteError",
    "RemoteUnreachable",
    "RemoteCallFailed",
    "RemoteProtocolError",
    "ReconcileStorageFailure",
]
