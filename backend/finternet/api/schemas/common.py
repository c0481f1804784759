from pydantic import BaseModel
from typing import Optional


class ErrorResponse(BaseModel):
    """Standard error response"""
    success: bool = False
    message: str
    code: str
    status_code: int
    path: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "success": False,
                "message": "Asset not found",
                "code": "NotFound",
                "status_code": 404,
                "path": "/api/assets/asset_123"
            }
        }


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = "healthy"
    service: str
    version: str = "0.1.0"
    timestamp: str

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "service": "auth-service",
                "version": "0.1.0",
                "timestamp": "2024-01-01T12:00:00Z"
            }
        }
