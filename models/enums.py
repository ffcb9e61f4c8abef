"""Enumeration types for Gateway Mirror models."""

from enum import Enum


class GatewayStatus(str, Enum):
    """Last observed reachability of a gateway.

    Sync outcomes only ever produce ONLINE or ERROR; OFFLINE is set
    administratively through the gateway update endpoint.
    """

    UNKNOWN = "unknown"
    ONLINE = "online"
    OFFLINE = "offline"
    ERROR = "error"


class SyncKind(str, Enum):
    """Entity kinds that can be mirrored from a gateway."""

    SESSIONS = "sessions"
    CRON = "cron"
    MESSAGES = "messages"
    USAGE = "usage"
