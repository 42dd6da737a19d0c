"""Mock payment router for FastAPI."""

import json
import logging
from pathlib import Path
from uuid import uuid4

import httpx
from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from payhook.core.exceptions import NotFoundError
from payhook.payments.providers.base import to_minor_units
from payhook.payments.providers.mock.provider import build_credited_event
from payhook.payments.signature import SIGNATURE_HEADER, compute_signature

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mock-payment", tags=["mock-payment"])

# Templates directory
TEMPLATES_DIR = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


async def _load_session(request: Request, artifact_id: str):
    service = request.app.state.payment_sessions
    payment_session = await service.get_session(artifact_id)
    if payment_session is None:
        raise NotFoundError(message="Unknown artifact", details={"artifact_id": artifact_id})
    return payment_session


@router.get("/{artifact_id}", response_class=HTMLResponse)
async def payment_page(request: Request, artifact_id: str) -> HTMLResponse:
    """Display mock payment page for a session."""
    payment_session = await _load_session(request, artifact_id)

    return templates.TemplateResponse(
        request,
        "payment_page.html",
        {
            "artifact_id": artifact_id,
            "amount": payment_session.amount,
            "status": payment_session.status.value,
        },
    )


@router.post("/{artifact_id}/pay", response_class=HTMLResponse)
async def process_payment(request: Request, artifact_id: str) -> HTMLResponse:
    """Process mock payment (simulate successful payment).

    1. Build a qr_code.credited event
    2. Sign it with the webhook secret
    3. Send POST to webhook endpoint
    4. Show result page

    The webhook call goes through ``app.state.mock_webhook_transport``
    when one is set, the default network transport otherwise.
    """
    payment_session = await _load_session(request, artifact_id)
    settings = request.app.state.settings

    payment_id = f"pay_mock_{uuid4().hex[:14]}"
    event = build_credited_event(
        artifact_id=artifact_id,
        payment_id=payment_id,
        amount_minor=to_minor_units(payment_session.amount),
    )
    body = json.dumps(event).encode()

    webhook_url = f"{settings.webhook_base_url.rstrip('/')}/api/webhook"
    webhook_status: int | None = None

    try:
        async with httpx.AsyncClient(transport=request.app.state.mock_webhook_transport) as client:
            response = await client.post(
                webhook_url,
                content=body,
                headers={
                    "Content-Type": "application/json",
                    SIGNATURE_HEADER: compute_signature(body, settings.webhook_secret),
                },
                timeout=10.0,
            )
            webhook_status = response.status_code
            logger.info(
                "Webhook response: status=%d, body=%s",
                response.status_code,
                response.text,
            )
    except httpx.HTTPError as e:
        logger.error("Webhook request failed: %s", e)

    return templates.TemplateResponse(
        request,
        "result.html",
        {
            "artifact_id": artifact_id,
            "payment_id": payment_id,
            "paid": webhook_status == 200,
            "webhook_status": webhook_status,
        },
    )


@router.post("/{artifact_id}/cancel", response_class=HTMLResponse)
async def cancel_payment(request: Request, artifact_id: str) -> HTMLResponse:
    """Cancel mock payment.

    Shows cancellation page. Does not call webhook.
    """
    logger.info("Mock payment cancelled: artifact_id=%s", artifact_id)

    return templates.TemplateResponse(
        request,
        "result.html",
        {
            "artifact_id": artifact_id,
            "payment_id": None,
            "paid": False,
            "webhook_status": None,
        },
    )
