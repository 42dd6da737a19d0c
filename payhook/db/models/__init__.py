from payhook.db.models.payment_session import PaymentSession, PaymentStatus

__all__ = [
    "PaymentSession",
    "PaymentStatus",
]
