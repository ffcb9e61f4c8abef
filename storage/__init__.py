"""Local cache storage for Gateway Mirror."""

from .database import Database
from .tables import Base, CronJobRow, GatewayRow, MessageRow, SessionRow, UsageStatRow

__all__ = [
    "Database",
    "Base",
    "GatewayRow",
    "SessionRow",
    "CronJobRow",
    "MessageRow",
    "UsageStatRow",
]
