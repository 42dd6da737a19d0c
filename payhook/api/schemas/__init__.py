"""API schemas."""

from payhook.api.schemas.payments import (
    CreatePaymentRequest,
    CreatePaymentResponse,
    ErrorResponse,
    PaymentSessionResponse,
    PaymentStatusResponse,
    WebhookResponse,
)

__all__ = [
    "CreatePaymentRequest",
    "CreatePaymentResponse",
    "ErrorResponse",
    "PaymentSessionResponse",
    "PaymentStatusResponse",
    "WebhookResponse",
]
