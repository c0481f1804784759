from .common import (
    ErrorResponse,
    HealthResponse
)

__all__ = [
    "ErrorResponse",
    "HealthResponse"
]
