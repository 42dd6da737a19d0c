"""Razorpay UPI QR code gateway."""

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


class RazorpayQrCodeGateway(ArtifactGateway):
    """Creates single-use, fixed-amount UPI QR codes.

    The processor fires ``qr_code.credited`` when the code is paid.
    """

    name = "razorpay_qr"
    credit_event = "qr_code.credited"
    artifact_entity = "qr_code"

    def __init__(
        self,
        client: RazorpayClient,
        merchant_name: str = "Flutter App Payment",
        description: str = "App Transaction",
        ttl_seconds: int = 300,
    ) -> None:
        self.client = client
        self.merchant_name = merchant_name
        self.description = description
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "RazorpayQrCodeGateway":
        return cls(
            client=RazorpayClient(
                key_id=settings.razorpay_key_id,
                key_secret=settings.razorpay_key_secret,
                base_url=settings.razorpay_base_url,
                timeout=settings.gateway_timeout_seconds,
            ),
            merchant_name=settings.merchant_name,
            description=settings.payment_description,
            ttl_seconds=settings.qr_code_ttl_seconds,
        )

    async def create_artifact(
        self,
        amount: Decimal,
        metadata: dict[str, str] | None = None,
    ) -> ArtifactResult:
        """Create QR code.

        ``fixed_amount`` stops the payer from changing the price and
        ``close_by`` bounds how long the PENDING session stays payable.
        """
        payload = {
            "type": "upi_qr",
            "name": self.merchant_name,
            "usage": "single_use",
            "fixed_amount": True,
            "payment_amount": to_minor_units(amount),
            "description": self.description,
            "close_by": int(time.time()) + self.ttl_seconds,
        }
        if metadata:
            payload["notes"] = metadata

        data = await self.client.post("/payments/qr_codes", payload)

        qr_id = data.get("id")
        image_url = data.get("image_url")
        if not qr_id or not image_url:
            raise ArtifactCreationError(
                message="Razorpay response is missing the QR code id or image URL",
                details={"response_keys": sorted(data)},
            )

        close_by = data.get("close_by")
        logger.info("QR code created: id=%s, amount=%s", qr_id, amount)

        return ArtifactResult(
            artifact_id=qr_id,
            presentation_target=image_url,
            kind=ArtifactKind.QR_CODE,
            expires_at=datetime.fromtimestamp(close_by, UTC) if close_by else None,
        )
