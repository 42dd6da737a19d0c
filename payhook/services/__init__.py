"""Business logic services."""

from payhook.services.payment_session_service import ApplyOutcome, PaymentSessionService
from payhook.services.reconciliation_service import ReconciliationService, WebhookAck

__all__ = [
    "ApplyOutcome",
    "PaymentSessionService",
    "ReconciliationService",
    "WebhookAck",
]
