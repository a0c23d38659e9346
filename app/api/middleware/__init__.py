"""API middleware."""

from app.api.middleware.auth import get_current_principal, get_principal_for_health
from app.api.middleware.correlation_id import CorrelationIdMiddleware

__all__ = ["get_current_principal", "get_principal_for_health", "CorrelationIdMiddleware"]
