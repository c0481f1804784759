from fastapi import APIRouter

from .routes import (
    auth_router,
    assets_router,
    transactions_router,
    health_router
)
from ..core.config import settings


def build_auth_router() -> APIRouter:
    """Routes served by the identity service"""
    api_router = APIRouter(prefix=settings.API_PREFIX)
    api_router.include_router(health_router)
    api_router.include_router(auth_router)
    return api_router


def build_asset_router() -> APIRouter:
    """Routes served by the asset service"""
    api_router = APIRouter(prefix=settings.API_PREFIX)
    api_router.include_router(health_router)
    api_router.include_router(assets_router)
    api_router.include_router(transactions_router)
    return api_router
