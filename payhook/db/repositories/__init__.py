from payhook.db.repositories.payment_session_repository import PaymentSessionRepository

__all__ = [
    "PaymentSessionRepository",
]
