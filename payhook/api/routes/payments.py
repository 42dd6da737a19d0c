"""Payment session endpoints."""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from payhook.api.dependencies import get_payment_session_service
from payhook.api.schemas.payments import (
    CreatePaymentRequest,
    CreatePaymentResponse,
    ErrorResponse,
    PaymentSessionResponse,
    PaymentStatusResponse,
)
from payhook.services.payment_session_service import PaymentSessionService

router = APIRouter(prefix="/api", tags=["payments"])


@router.post(
    "/create-payment",
    response_model=CreatePaymentResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid amount"},
        502: {"model": ErrorResponse, "description": "Processor rejected the request"},
        504: {"model": ErrorResponse, "description": "Processor timed out"},
        500: {"model": ErrorResponse, "description": "Artifact created but not recorded"},
    },
)
async def create_payment(
    request: CreatePaymentRequest,
    service: PaymentSessionService = Depends(get_payment_session_service),
) -> CreatePaymentResponse:
    """Create payment artifact and PENDING session.

    Errors are mapped by the application exception handlers.
    """
    payment_session = await service.start_session(request.amount, request.notes)

    return CreatePaymentResponse(
        id=payment_session.artifact_id,
        presentation_target=payment_session.presentation_target,
        status=payment_session.status,
        expires_at=payment_session.expires_at,
    )


@router.get(
    "/check-status/{artifact_id}",
    response_model=PaymentStatusResponse,
    response_model_exclude_none=True,
    responses={404: {"model": PaymentStatusResponse, "description": "Unknown artifact"}},
)
async def check_status(
    artifact_id: str,
    service: PaymentSessionService = Depends(get_payment_session_service),
):
    """Poll session status from the store, never from the processor."""
    payment_session = await service.get_session(artifact_id)

    if payment_session is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"status": "NOT_FOUND"},
        )

    return PaymentStatusResponse(
        status=payment_session.status.value,
        settlement_reference=payment_session.settlement_reference,
    )


@router.get("/orders", response_model=list[PaymentSessionResponse])
async def list_orders(
    limit: int | None = Query(None, ge=1, description="Max sessions (capped by server)"),
    service: PaymentSessionService = Depends(get_payment_session_service),
) -> list[PaymentSessionResponse]:
    """Transaction history, most recent first."""
    sessions = await service.list_history(limit)
    return [PaymentSessionResponse.model_validate(s) for s in sessions]
