"""Mock artifact gateway implementation."""

import logging
import time
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any
from uuid import uuid4

from payhook.payments.providers.base import ArtifactGateway, to_minor_units
from payhook.payments.schemas import ArtifactKind, ArtifactResult

logger = logging.getLogger(__name__)


def build_credited_event(
    artifact_id: str,
    payment_id: str,
    amount_minor: int,
) -> dict[str, Any]:
    """Build a ``qr_code.credited`` event body shaped like Razorpay's."""
    now = int(time.time())
    return {
        "entity": "event",
        "account_id": "acc_mock",
        "event": "qr_code.credited",
        "contains": ["payment", "qr_code"],
        "payload": {
            "payment": {
                "entity": {
                    "id": payment_id,
                    "entity": "payment",
                    "amount": amount_minor,
                    "status": "captured",
                    "method": "upi",
                    "created_at": now,
                },
            },
            "qr_code": {
                "entity": {
                    "id": artifact_id,
                    "entity": "qr_code",
                    "usage": "single_use",
                    "fixed_amount": True,
                    "payment_amount": amount_minor,
                    "payments_amount_received": amount_minor,
                    "payments_count_received": 1,
                    "status": "closed",
                    "close_reason": "paid",
                },
            },
        },
        "created_at": now,
    }


class MockArtifactGateway(ArtifactGateway):
    """Mock gateway for local development and tests.

    Implements the same interface and event format as the Razorpay QR
    gateway, but the "processor" is the local /mock-payment page.
    """

    name = "mock"
    credit_event = "qr_code.credited"
    artifact_entity = "qr_code"

    def __init__(self, base_url: str = "http://localhost:8000", ttl_seconds: int = 300) -> None:
        self.base_url = base_url.rstrip("/")
        self.ttl_seconds = ttl_seconds

    async def create_artifact(
        self,
        amount: Decimal,
        metadata: dict[str, str] | None = None,
    ) -> ArtifactResult:
        """Issue a local artifact pointing at the mock payment page."""
        to_minor_units(amount)

        artifact_id = f"qr_mock_{uuid4().hex[:14]}"
        logger.info("Mock artifact created: id=%s, amount=%s", artifact_id, amount)

        return ArtifactResult(
            artifact_id=artifact_id,
            presentation_target=f"{self.base_url}/mock-payment/{artifact_id}",
            kind=ArtifactKind.QR_CODE,
            expires_at=datetime.now(UTC) + timedelta(seconds=self.ttl_seconds),
        )
