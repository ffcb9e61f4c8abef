"""API routers for Gateway Mirror."""

from .cache import router as cache_router
from .errors import register_exception_handlers
from .gateways import router as gateways_router
from .health import router as health_router
from .metrics import router as metrics_router
from .sync import router as sync_router

__all__ = [
    "cache_router",
    "gateways_router",
    "health_router",
    "metrics_router",
    "sync_router",
    "register_exception_handlers",
]
