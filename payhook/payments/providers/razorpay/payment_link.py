"""Razorpay hosted payment link gateway."""

import logging
import time
from datetime import UTC, datetime
from decimal import Decimal

from payhook.core.config import Settings
from payhook.core.exceptions import ArtifactCreationError
from payhook.payments.providers.base import ArtifactGateway, to_minor_units
from payhook.payments.providers.razorpay.client import RazorpayClient
from payhook.payments.schemas import ArtifactKind, ArtifactResult

logger = logging.getLogger(__name__)


class RazorpayPaymentLinkGateway(ArtifactGateway):
    """Creates hosted payment links; the processor fires ``payment_link.paid``."""

    name = "razorpay_link"
    credit_event = "payment_link.paid"
    artifact_entity = "payment_link"

    def __init__(
        self,
        client: RazorpayClient,
        currency: str = "INR",
        description: str = "App Transaction",
        ttl_seconds: int = 900,
    ) -> None:
        self.client = client
        self.currency = currency
        self.description = description
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "RazorpayPaymentLinkGateway":
        return cls(
            client=RazorpayClient(
                key_id=settings.razorpay_key_id,
                key_secret=settings.razorpay_key_secret,
                base_url=settings.razorpay_base_url,
                timeout=settings.gateway_timeout_seconds,
            ),
            currency=settings.currency,
            description=settings.payment_description,
            ttl_seconds=settings.payment_link_ttl_seconds,
        )

    async def create_artifact(
        self,
        amount: Decimal,
        metadata: dict[str, str] | None = None,
    ) -> ArtifactResult:
        payload = {
            "amount": to_minor_units(amount),
            "currency": self.currency,
            "accept_partial": False,
            "description": self.description,
            "expire_by": int(time.time()) + self.ttl_seconds,
            "reminder_enable": False,
        }
        if metadata:
            payload["notes"] = metadata

        data = await self.client.post("/payment_links", payload)

        link_id = data.get("id")
        short_url = data.get("short_url")
        if not link_id or not short_url:
            raise ArtifactCreationError(
                message="Razorpay response is missing the payment link id or URL",
                details={"response_keys": sorted(data)},
            )

        expire_by = data.get("expire_by")
        logger.info("Payment link created: id=%s, amount=%s", link_id, amount)

        return ArtifactResult(
            artifact_id=link_id,
            presentation_target=short_url,
            kind=ArtifactKind.PAYMENT_LINK,
            expires_at=datetime.fromtimestamp(expire_by, UTC) if expire_by else None,
        )
