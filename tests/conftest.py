"""Pytest fixtures."""

import json
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any
from uuid import uuid4

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.pool import StaticPool

from payhook.api import create_api
from payhook.core.config import Settings
from payhook.db.session import Database
from payhook.payments.providers.base import ArtifactGateway, to_minor_units
from payhook.payments.schemas import ArtifactKind, ArtifactResult
from payhook.payments.signature import SIGNATURE_HEADER, compute_signature
from payhook.services.payment_session_service import PaymentSessionService

WEBHOOK_SECRET = "whsec_test_secret"


class StubGateway(ArtifactGateway):
    """Gateway double handing out preset artifact ids, or failing."""

    name = "stub"
    credit_event = "qr_code.credited"
    artifact_entity = "qr_code"

    def __init__(
        self,
        artifact_ids: list[str] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.artifact_ids = list(artifact_ids or [])
        self.error = error
        self.calls: list[tuple[Decimal, dict[str, str] | None]] = []

    async def create_artifact(
        self,
        amount: Decimal,
        metadata: dict[str, str] | None = None,
    ) -> ArtifactResult:
        self.calls.append((amount, metadata))
        to_minor_units(amount)
        if self.error is not None:
            raise self.error

        artifact_id = self.artifact_ids.pop(0) if self.artifact_ids else f"qr_{uuid4().hex[:14]}"
        return ArtifactResult(
            artifact_id=artifact_id,
            presentation_target=f"https://rzp.io/i/{artifact_id}.png",
            kind=ArtifactKind.QR_CODE,
        )


class RefusingDatabase:
    """Database whose connections are refused by the server."""

    @asynccontextmanager
    async def session(self):
        raise ConnectionRefusedError(111, "Connect call failed")
        yield None

    async def dispose(self) -> None:
        pass


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "database_url": "sqlite+aiosqlite://",
        "payment_provider": "mock",
        "webhook_secret": WEBHOOK_SECRET,
        "webhook_base_url": "http://test",
        "rate_limit_calls": 1000,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def signed(event: dict[str, Any] | bytes, secret: str = WEBHOOK_SECRET) -> tuple[bytes, dict[str, str]]:
    """Body and headers for a webhook delivery signed like the processor does."""
    body = event if isinstance(event, bytes) else json.dumps(event).encode()
    return body, {
        "Content-Type": "application/json",
        SIGNATURE_HEADER: compute_signature(body, secret),
    }


def credited_event(artifact_id: str, payment_id: str) -> dict[str, Any]:
    return {
        "event": "qr_code.credited",
        "payload": {
            "qr_code": {"entity": {"id": artifact_id}},
            "payment": {"entity": {"id": payment_id}},
        },
    }


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest_asyncio.fixture
async def database():
    db = Database(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await db.create_schema()
    yield db
    await db.dispose()


@pytest.fixture
def gateway() -> StubGateway:
    return StubGateway()


@pytest.fixture
def service(database, gateway, settings) -> PaymentSessionService:
    return PaymentSessionService(database, gateway, settings)


@pytest.fixture
def app(settings, database, gateway):
    return create_api(settings, database=database, gateway=gateway)


@pytest_asyncio.fixture
async def client(app):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
