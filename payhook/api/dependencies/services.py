"""Service dependencies built once by create_api()."""

from fastapi import Request

from payhook.services.payment_session_service import PaymentSessionService
from payhook.services.reconciliation_service import ReconciliationService


def get_payment_session_service(request: Request) -> PaymentSessionService:
    return request.app.state.payment_sessions


def get_reconciliation_service(request: Request) -> ReconciliationService:
    return request.app.state.reconciliation
