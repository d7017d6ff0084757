"""
Trophy API - Health Check Route
=================================

What:  Liveness probe for load balancers and container health checks.
How:   Answers as long as the process is serving requests. It sits under
       /api, so it shares the API rate limit.
"""

from fastapi import APIRouter

from app.schemas.trophy import HealthResponse

router = APIRouter(prefix="/api", tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service liveness check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok")
