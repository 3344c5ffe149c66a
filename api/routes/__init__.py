"""
API Routes
"""
from api.routes.health import router as health_router
from api.routes.webhooks import router as webhooks_router

__all__ = [
    "health_router",
    "webhooks_router",
]
