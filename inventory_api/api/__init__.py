"""API package exports."""

from inventory_api.api.auth import router as auth_router
from inventory_api.api.middleware import CorrelationIdMiddleware
from inventory_api.api.routes import router

__all__ = ["auth_router", "router", "CorrelationIdMiddleware"]
