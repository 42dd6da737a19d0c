from payhook.api.dependencies.services import (
    get_payment_session_service,
    get_reconciliation_service,
)

__all__ = [
    "get_payment_session_service",
    "get_reconciliation_service",
]
