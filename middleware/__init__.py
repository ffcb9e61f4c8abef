"""HTTP middleware for Gateway Mirror."""

from .correlation import CorrelationMiddleware

__all__ = ["CorrelationMiddleware"]
