from .auth import router as auth_router
from .assets import router as assets_router
from .transactions import router as transactions_router
from .health import router as health_router

__all__ = [
    "auth_router",
    "assets_router",
    "transactions_router",
    "health_router"
]
