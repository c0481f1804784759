import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional

from finternet.core.config import settings
from finternet.api.api import build_auth_router, build_asset_router
from finternet.api.errors import register_exception_handlers
from finternet.services.identity_service import IdentityService, get_identity_service
from finternet.services.asset_service import AssetService, get_asset_service

logger = logging.getLogger(__name__)


def configure_logging():
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"{app.state.service_name} starting ({'debug' if settings.DEBUG else 'production'} mode)")

    yield

    # Shutdown
    logger.info(f"{app.state.service_name} stopped")


def _build_app(service_name: str, title: str, description: str) -> FastAPI:
    app = FastAPI(
        title=title,
        description=description,
        version=settings.VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.service_name = service_name

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Authorization", "Accept"],
        expose_headers=["Content-Length"],
        max_age=12 * 3600
    )

    register_exception_handlers(app)
    return app


def create_auth_app(identity_service: Optional[IdentityService] = None) -> FastAPI:
    """
    Build the identity service application.

    Without an explicit service the process-wide singleton is used, which
    fails with ConfigurationError when JWT_SECRET is unset.
    """
    configure_logging()
    app = _build_app(
        "auth-service",
        title="Finternet Identity API",
        description="Registration, login and multi-factor authentication"
    )
    app.state.identity_service = identity_service or get_identity_service()
    app.include_router(build_auth_router())
    return app


def create_asset_app(asset_service: Optional[AssetService] = None) -> FastAPI:
    """Build the asset service application"""
    configure_logging()
    app = _build_app(
        "asset-service",
        title="Finternet Asset API",
        description="Tokenized asset ownership ledger"
    )
    app.state.asset_service = asset_service or get_asset_service()
    app.include_router(build_asset_router())
    return app
