"""API module."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from payhook.api.middleware.rate_limit import RateLimitMiddleware
from payhook.api.routes import health, payments, webhook
from payhook.core.config import Settings, get_settings
from payhook.core.exceptions import (
    AppException,
    ArtifactCreationError,
    ArtifactGatewayTimeoutError,
    NotFoundError,
    PersistenceError,
    UntrackedArtifactError,
    ValidationError,
)
from payhook.db.session import Database
from payhook.payments.providers import ArtifactGateway, get_artifact_gateway
from payhook.services.payment_session_service import PaymentSessionService
from payhook.services.reconciliation_service import ReconciliationService

logger = logging.getLogger(__name__)


def _status_for(exc: AppException) -> int:
    """HTTP status for an application error."""
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ArtifactGatewayTimeoutError):
        return 504
    if isinstance(exc, ArtifactCreationError):
        return 502
    if isinstance(exc, UntrackedArtifactError):
        return 500
    if isinstance(exc, PersistenceError):
        return 503
    return 500


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    status_code = _status_for(exc)
    if status_code >= 500:
        logger.error("Request failed: path=%s, error=%r", request.url.path, exc)

    content = {"error": exc.message, "code": exc.error_code}
    if isinstance(exc, UntrackedArtifactError):
        content["details"] = exc.details

    return JSONResponse(status_code=status_code, content=content)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    field = ".".join(str(part) for part in errors[0]["loc"]) if errors else None

    return JSONResponse(
        status_code=400,
        content={"error": message, "code": ValidationError.error_code, "details": {"field": field}},
    )


def create_api(
    settings: Settings | None = None,
    database: Database | None = None,
    gateway: ArtifactGateway | None = None,
) -> FastAPI:
    """Create FastAPI application.

    The store handle and gateway are built here, once, and shared by
    every request. Tests pass their own.
    """
    settings = settings or get_settings()
    database = database or Database.from_settings(settings)
    gateway = gateway or get_artifact_gateway(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Payment API started: provider=%s, gateway=%s",
            settings.payment_provider,
            gateway.name,
        )
        yield
        await database.dispose()
        logger.info("Payment API stopped")

    app = FastAPI(
        title="Payhook API",
        description="Payment sessions with processor webhook reconciliation",
        version="1.0.0",
        lifespan=lifespan,
    )

    payment_sessions = PaymentSessionService(database, gateway, settings)
    app.state.settings = settings
    app.state.database = database
    app.state.payment_sessions = payment_sessions
    app.state.reconciliation = ReconciliationService(
        payment_sessions=payment_sessions,
        gateway=gateway,
        webhook_secret=settings.webhook_secret,
    )

    # Add rate limiting middleware
    app.add_middleware(
        RateLimitMiddleware,
        calls=settings.rate_limit_calls,
        period=settings.rate_limit_period,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(payments.router)
    app.include_router(webhook.router)

    if settings.payment_provider == "mock":
        from payhook.payments.providers.mock.router import router as mock_payment_router

        # Transport for the simulated webhook call; None uses the network
        app.state.mock_webhook_transport = None
        app.include_router(mock_payment_router)

    return app


__all__ = ["create_api"]
