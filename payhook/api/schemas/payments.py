"""Payment API schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from payhook.db.models.payment_session import PaymentStatus


class CamelModel(BaseModel):
    """Serializes with camelCase keys, accepts either case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CreatePaymentRequest(CamelModel):
    """Request to start a payment session."""

    amount: Decimal = Field(..., description="Amount in major currency units (>= 1)")
    notes: dict[str, str] | None = Field(None, description="Notes forwarded to the processor")


class CreatePaymentResponse(CamelModel):
    """Response after a session is created."""

    id: str
    presentation_target: str
    status: PaymentStatus
    expires_at: datetime | None = None


class PaymentStatusResponse(CamelModel):
    """Status poll response."""

    status: str
    settlement_reference: str | None = None


class PaymentSessionResponse(CamelModel):
    """Session as listed in history."""

    artifact_id: str
    amount: Decimal
    status: PaymentStatus
    settlement_reference: str | None = None
    created_at: datetime


class WebhookResponse(BaseModel):
    """Webhook acknowledgement."""

    status: str


class ErrorResponse(BaseModel):
    """Error response."""

    error: str  # Human-readable message
    code: str | None = None  # Error code
    details: dict | None = None
