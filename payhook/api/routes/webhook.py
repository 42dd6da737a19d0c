"""Webhook handler for processor callbacks."""

import logging

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import JSONResponse

from payhook.api.dependencies import get_reconciliation_service
from payhook.api.schemas.payments import WebhookResponse
from payhook.core.exceptions import SignatureInvalidError
from payhook.services.reconciliation_service import ReconciliationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["webhook"])


@router.post(
    "/webhook",
    response_model=WebhookResponse,
    responses={400: {"model": WebhookResponse, "description": "Invalid signature"}},
)
async def processor_webhook(
    request: Request,
    x_razorpay_signature: str | None = Header(default=None),
    service: ReconciliationService = Depends(get_reconciliation_service),
):
    """Processor sends POST here when money is received.

    The signature is checked against the raw body bytes, so the body is
    read untouched rather than through a parsed model.
    """
    raw_body = await request.body()

    try:
        ack = await service.handle(raw_body, x_razorpay_signature)
    except SignatureInvalidError:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"status": "invalid_signature"},
        )

    logger.debug("Webhook acknowledged: event=%s, outcome=%s", ack.event, ack.outcome)
    return WebhookResponse(status=ack.status)
