"""Webhook reconciliation: verify, parse, dispatch, acknowledge."""

import json
import logging

from pydantic import BaseModel

from payhook.core.exceptions import AppException, SignatureInvalidError
from payhook.payments.providers.base import ArtifactGateway
from payhook.payments.schemas import ArtifactCredited, UnrecognizedEvent
from payhook.payments.signature import verify_signature
from payhook.services.payment_session_service import ApplyOutcome, PaymentSessionService

logger = logging.getLogger(__name__)


class WebhookAck(BaseModel):
    """What the handler did with a verified webhook."""

    status: str = "ok"
    event: str | None = None
    outcome: ApplyOutcome | None = None


class ReconciliationService:
    """Handles processor webhooks.

    Once the signature is valid the processor always gets a 2xx: it
    retries on anything else, and internal failures are not its concern.
    """

    def __init__(
        self,
        payment_sessions: PaymentSessionService,
        gateway: ArtifactGateway,
        webhook_secret: str,
    ) -> None:
        self.payment_sessions = payment_sessions
        self.gateway = gateway
        self.webhook_secret = webhook_secret

    async def handle(self, raw_body: bytes, signature: str | None) -> WebhookAck:
        """Process webhook delivery.

        1. Verify signature over the raw body
        2. Parse event
        3. Apply success for credit events
        4. Acknowledge

        Args:
            raw_body: Request body exactly as received
            signature: Signature header value

        Returns:
            Acknowledgement

        Raises:
            SignatureInvalidError: If the body was not signed with the secret
        """
        if not verify_signature(raw_body, signature, self.webhook_secret):
            logger.warning(
                "Invalid webhook signature: body_bytes=%d, signature_present=%s",
                len(raw_body),
                bool(signature),
            )
            raise SignatureInvalidError()

        logger.info("Webhook verified")

        try:
            payload = json.loads(raw_body)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error("Verified webhook body is not JSON, ignoring: %s", e)
            return WebhookAck()

        event = self.gateway.parse_event(payload)

        if isinstance(event, UnrecognizedEvent):
            logger.info("Webhook event ignored: event=%s, reason=%s", event.event, event.reason)
            return WebhookAck(event=event.event)

        return await self._dispatch(event)

    async def _dispatch(self, event: ArtifactCredited) -> WebhookAck:
        try:
            outcome = await self.payment_sessions.apply_success(
                artifact_id=event.artifact_id,
                settlement_reference=event.settlement_reference,
            )
        except AppException as e:
            logger.error(
                "Webhook not applied, acknowledging anyway: event=%s, artifact_id=%s, "
                "settlement_reference=%s, error=%r",
                event.event,
                event.artifact_id,
                event.settlement_reference,
                e,
            )
            return WebhookAck(event=event.event)

        return WebhookAck(event=event.event, outcome=outcome)
