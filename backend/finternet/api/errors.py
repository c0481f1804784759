from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from ..services.exceptions import (
    FinternetError, InvalidTokenError, ExpiredTokenError, UnknownIdentityError
)

logger = logging.getLogger(__name__)

BEARER_ERRORS = (InvalidTokenError, ExpiredTokenError, UnknownIdentityError)


async def finternet_exception_handler(request: Request, exc: FinternetError):
    """Map domain errors to their status code and stable error code"""
    logger.info(f"{exc.code}: {exc.message} - {request.method} {request.url.path}")

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, BEARER_ERRORS) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": exc.message,
            "code": exc.code,
            "status_code": exc.status_code,
            "path": str(request.url.path)
        },
        headers=headers
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with structured error response"""
    logger.warning(f"HTTP {exc.status_code}: {exc.detail} - {request.url.path}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": exc.detail,
            "code": "HTTPError",
            "status_code": exc.status_code,
            "path": str(request.url.path)
        },
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with detailed error information"""
    # Rejected input is not echoed: it may hold a password or a non-finite float
    errors = [
        {key: value for key, value in error.items() if key != "input"}
        for error in exc.errors()
    ]
    logger.warning(f"Validation error: {errors} - {request.url.path}")

    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "message": "Validation error",
            "code": "ValidationError",
            "status_code": 422,
            "errors": jsonable_encoder(errors),
            "path": str(request.url.path)
        }
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions without leaking details"""
    logger.error(f"Unexpected error: {str(exc)} - {request.url.path}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Internal server error",
            "code": "InternalError",
            "status_code": 500,
            "path": str(request.url.path)
        }
    )


def register_exception_handlers(app):
    app.add_exception_handler(FinternetError, finternet_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
