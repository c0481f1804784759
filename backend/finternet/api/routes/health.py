from fastapi import APIRouter, Request
from datetime import datetime, timezone

from ..schemas import HealthResponse
from ...core.config import settings

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check(request: Request):
    """Static liveness payload"""
    return HealthResponse(
        status="healthy",
        service=request.app.state.service_name,
        version=settings.VERSION,
        timestamp=datetime.now(timezone.utc).isoformat()
    )
