"""Health check endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from payhook.api.dependencies import get_payment_session_service
from payhook.services.payment_session_service import PaymentSessionService

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str = "payhook-api"


class ReadyResponse(BaseModel):
    """Readiness check response."""

    status: str
    database: str
    service: str = "payhook-api"


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Liveness probe.

    Returns 200 if the service is running.
    """
    return HealthResponse(status="ok")


@router.get("/ready", response_model=ReadyResponse)
async def readiness_check(
    service: PaymentSessionService = Depends(get_payment_session_service),
):
    """
    Readiness probe.

    Returns 200 if the session store is reachable, 503 otherwise.
    """
    if await service.check_store():
        return ReadyResponse(status="ok", database="connected")

    return JSONResponse(
        status_code=503,
        content=ReadyResponse(status="degraded", database="disconnected").model_dump(),
    )
