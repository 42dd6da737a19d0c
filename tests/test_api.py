"""HTTP API tests: session creation, polling, history and webhooks."""

import logging
from decimal import Decimal

import httpx
import pytest

from payhook.api import create_api
from payhook.api.middleware.rate_limit import RateLimitMiddleware
from payhook.core.exceptions import ArtifactCreationError, ArtifactGatewayTimeoutError
from payhook.db.session import Database
from payhook.payments.providers.mock import MockArtifactGateway
from payhook.payments.signature import SIGNATURE_HEADER
from tests.conftest import (
    WEBHOOK_SECRET,
    RefusingDatabase,
    StubGateway,
    credited_event,
    make_settings,
    signed,
)

pytestmark = [pytest.mark.asyncio]


async def create_payment(client: httpx.AsyncClient, amount=500) -> dict:
    response = await client.post("/api/create-payment", json={"amount": amount})
    assert response.status_code == 200, response.text
    return response.json()


async def status_of(client: httpx.AsyncClient, artifact_id: str) -> httpx.Response:
    return await client.get(f"/api/check-status/{artifact_id}")


class TestCreatePayment:
    """POST /api/create-payment"""

    async def test_returns_artifact_and_pending_status(self, client, gateway):
        gateway.artifact_ids.append("qr_A1")

        response = await client.post("/api/create-payment", json={"amount": 500})

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == "qr_A1"
        assert body["presentationTarget"] == "https://rzp.io/i/qr_A1.png"
        assert body["status"] == "PENDING"

    @pytest.mark.parametrize("amount", [0, -1, 0.5, "abc", None])
    async def test_invalid_amount(self, client, gateway, amount):
        response = await client.post("/api/create-payment", json={"amount": amount})

        assert response.status_code == 400
        assert response.json()["error"]
        assert gateway.calls == []

    async def test_missing_body(self, client):
        response = await client.post("/api/create-payment")

        assert response.status_code == 400
        assert "error" in response.json()

    async def test_processor_failure(self, settings, database):
        gateway = StubGateway(error=ArtifactCreationError("Authentication failed"))
        app = create_api(settings, database=database, gateway=gateway)

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/api/create-payment", json={"amount": 500})
            orders = await client.get("/api/orders")

        assert response.status_code == 502
        assert response.json() == {"error": "Authentication failed", "code": "ARTIFACT_CREATION_FAILED"}
        assert orders.json() == []

    async def test_processor_timeout(self, settings, database):
        gateway = StubGateway(error=ArtifactGatewayTimeoutError())
        app = create_api(settings, database=database, gateway=gateway)

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/api/create-payment", json={"amount": 500})

        assert response.status_code == 504
        assert response.json()["code"] == "GATEWAY_TIMEOUT"

    async def test_untracked_artifact(self, client, gateway):
        gateway.artifact_ids.extend(["qr_dup", "qr_dup"])
        await create_payment(client)

        response = await client.post("/api/create-payment", json={"amount": 500})

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "UNTRACKED_ARTIFACT"
        assert body["details"] == {"artifact_id": "qr_dup"}

    async def test_unreachable_store_reports_untracked_artifact(self, settings):
        app = create_api(settings, database=RefusingDatabase(), gateway=StubGateway(["qr_B2"]))

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/api/create-payment", json={"amount": 500})
            status = await status_of(client, "qr_B2")

        assert response.status_code == 500
        assert response.json()["code"] == "UNTRACKED_ARTIFACT"
        assert response.json()["details"] == {"artifact_id": "qr_B2"}
        assert status.status_code == 503
        assert status.json()["code"] == "PERSISTENCE_FAILURE"


class TestCheckStatus:
    """GET /api/check-status/{id}"""

    async def test_pending(self, client):
        created = await create_payment(client)

        response = await status_of(client, created["id"])

        assert response.status_code == 200
        assert response.json() == {"status": "PENDING"}

    async def test_unknown(self, client):
        response = await status_of(client, "qr_never_created")

        assert response.status_code == 404
        assert response.json() == {"status": "NOT_FOUND"}


class TestOrders:
    """GET /api/orders"""

    async def test_most_recent_first(self, client):
        for amount in (10, 20, 30):
            await create_payment(client, amount)

        response = await client.get("/api/orders")

        assert response.status_code == 200
        orders = response.json()
        assert [Decimal(o["amount"]) for o in orders] == [Decimal("30"), Decimal("20"), Decimal("10")]
        assert set(orders[0]) >= {"artifactId", "amount", "status", "createdAt"}
        assert all(o["status"] == "PENDING" for o in orders)

    async def test_limit(self, client):
        for amount in (10, 20, 30):
            await create_payment(client, amount)

        response = await client.get("/api/orders", params={"limit": 2})

        assert len(response.json()) == 2

    async def test_limit_capped_by_server(self, database, gateway):
        app = create_api(
            make_settings(history_default_limit=2, history_max_limit=2),
            database=database,
            gateway=gateway,
        )

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            for amount in (10, 20, 30):
                await create_payment(client, amount)
            response = await client.get("/api/orders", params={"limit": 50})

        assert len(response.json()) == 2

    async def test_invalid_limit(self, client):
        response = await client.get("/api/orders", params={"limit": 0})

        assert response.status_code == 400


class TestWebhook:
    """POST /api/webhook"""

    async def test_credited_event_marks_success(self, client, gateway):
        gateway.artifact_ids.append("qr_A1")
        await create_payment(client, 500)
        orders = (await client.get("/api/orders")).json()
        assert orders[0]["artifactId"] == "qr_A1"
        assert Decimal(orders[0]["amount"]) == Decimal("500")
        assert orders[0]["status"] == "PENDING"

        body, headers = signed(credited_event("qr_A1", "pay_X9"))
        response = await client.post("/api/webhook", content=body, headers=headers)

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        status = await status_of(client, "qr_A1")
        assert status.json() == {"status": "SUCCESS", "settlementReference": "pay_X9"}

    async def test_duplicate_delivery_is_acknowledged_and_ignored(self, client, gateway):
        gateway.artifact_ids.append("qr_A1")
        await create_payment(client, 500)
        body, headers = signed(credited_event("qr_A1", "pay_X9"))

        first = await client.post("/api/webhook", content=body, headers=headers)
        before = (await client.get("/api/orders")).json()
        second = await client.post("/api/webhook", content=body, headers=headers)
        after = (await client.get("/api/orders")).json()

        assert first.status_code == second.status_code == 200
        assert second.json() == {"status": "ok"}
        assert after == before
        assert after[0]["settlementReference"] == "pay_X9"

    async def test_tampered_signature_is_rejected(self, client, gateway):
        gateway.artifact_ids.append("qr_A1")
        await create_payment(client, 500)
        body, headers = signed(credited_event("qr_A1", "pay_X9"))
        headers[SIGNATURE_HEADER] = headers[SIGNATURE_HEADER][:-1] + (
            "0" if headers[SIGNATURE_HEADER][-1] != "0" else "1"
        )

        response = await client.post("/api/webhook", content=body, headers=headers)

        assert response.status_code == 400
        assert response.json() == {"status": "invalid_signature"}
        assert (await status_of(client, "qr_A1")).json() == {"status": "PENDING"}

    async def test_tampered_body_is_rejected(self, client, gateway):
        gateway.artifact_ids.append("qr_A1")
        await create_payment(client, 500)
        _, headers = signed(credited_event("qr_A1", "pay_X9"))
        forged, _ = signed(credited_event("qr_A1", "pay_FORGED"))

        response = await client.post("/api/webhook", content=forged, headers=headers)

        assert response.status_code == 400
        assert (await status_of(client, "qr_A1")).json() == {"status": "PENDING"}

    async def test_wrong_secret_is_rejected(self, client, gateway):
        gateway.artifact_ids.append("qr_A1")
        await create_payment(client, 500)
        body, headers = signed(credited_event("qr_A1", "pay_X9"), secret="not-" + WEBHOOK_SECRET)

        response = await client.post("/api/webhook", content=body, headers=headers)

        assert response.status_code == 400
        assert (await status_of(client, "qr_A1")).json() == {"status": "PENDING"}

    async def test_missing_signature_is_rejected(self, client):
        body, _ = signed(credited_event("qr_A1", "pay_X9"))

        response = await client.post("/api/webhook", content=body)

        assert response.status_code == 400
        assert response.json() == {"status": "invalid_signature"}

    async def test_orphan_event_is_acknowledged(self, client):
        body, headers = signed(credited_event("qr_unknown", "pay_1"))

        response = await client.post("/api/webhook", content=body, headers=headers)

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        assert (await client.get("/api/orders")).json() == []
        assert (await status_of(client, "qr_unknown")).status_code == 404

    async def test_other_events_are_acknowledged_without_change(self, client, gateway):
        gateway.artifact_ids.append("qr_A1")
        await create_payment(client, 500)
        body, headers = signed(
            {"event": "qr_code.closed", "payload": {"qr_code": {"entity": {"id": "qr_A1"}}}}
        )

        response = await client.post("/api/webhook", content=body, headers=headers)

        assert response.status_code == 200
        assert (await status_of(client, "qr_A1")).json() == {"status": "PENDING"}

    async def test_incomplete_credit_event_is_acknowledged(self, client, gateway):
        gateway.artifact_ids.append("qr_A1")
        await create_payment(client, 500)
        body, headers = signed(
            {"event": "qr_code.credited", "payload": {"qr_code": {"entity": {"id": "qr_A1"}}}}
        )

        response = await client.post("/api/webhook", content=body, headers=headers)

        assert response.status_code == 200
        assert (await status_of(client, "qr_A1")).json() == {"status": "PENDING"}

    async def test_signed_non_json_body_is_acknowledged(self, client):
        body, headers = signed(b"not json at all")

        response = await client.post("/api/webhook", content=body, headers=headers)

        assert response.status_code == 200

    async def test_signature_checked_over_raw_bytes(self, client, gateway):
        gateway.artifact_ids.append("qr_A1")
        await create_payment(client, 500)
        raw = (
            b'{ "payload" : { "payment": {"entity": {"id": "pay_X9"}},\n'
            b'  "qr_code": {"entity": {"id": "qr_A1"}} },\n  "event": "qr_code.credited" }'
        )
        body, headers = signed(raw)

        response = await client.post("/api/webhook", content=body, headers=headers)

        assert response.status_code == 200
        assert (await status_of(client, "qr_A1")).json()["status"] == "SUCCESS"


    async def test_store_failure_is_still_acknowledged(self, settings, gateway, caplog):
        app = create_api(settings, database=RefusingDatabase(), gateway=gateway)
        body, headers = signed(credited_event("qr_A1", "pay_X9"))

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            with caplog.at_level(logging.ERROR):
                response = await client.post("/api/webhook", content=body, headers=headers)

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        assert "acknowledging anyway" in caplog.text
        assert "qr_A1" in caplog.text

    async def test_closed_port_store_is_still_acknowledged(self, settings, gateway):
        database = Database("postgresql+asyncpg://u:p@127.0.0.1:1/x")
        app = create_api(settings, database=database, gateway=gateway)
        body, headers = signed(credited_event("qr_A1", "pay_X9"))

        try:
            async with httpx.AsyncClient(
                transport=httpx.ASGITransport(app=app), base_url="http://test"
            ) as client:
                response = await client.post("/api/webhook", content=body, headers=headers)
        finally:
            await database.dispose()

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    async def test_bad_signature_rejected_before_store(self, settings, gateway):
        app = create_api(settings, database=RefusingDatabase(), gateway=gateway)
        body, headers = signed(credited_event("qr_A1", "pay_X9"), secret="whsec_wrong")

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/api/webhook", content=body, headers=headers)

        assert response.status_code == 400
        assert response.json() == {"status": "invalid_signature"}


class TestPlumbing:
    """Health, CORS and rate limiting."""

    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    async def test_ready(self, client):
        response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    async def test_cors_headers(self, client):
        response = await client.get("/api/orders", headers={"Origin": "https://app.example.com"})

        assert response.headers["access-control-allow-origin"] == "*"

    async def test_rate_limit_spares_webhook(self, database, gateway):
        app = create_api(make_settings(rate_limit_calls=2), database=database, gateway=gateway)

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            statuses = [(await client.get("/api/orders")).status_code for _ in range(3)]
            webhook_statuses = [
                (await client.post("/api/webhook", content=b"{}")).status_code for _ in range(3)
            ]

        assert statuses == [200, 200, 429]
        assert webhook_statuses == [400, 400, 400]

    async def test_rate_limit_forgets_idle_clients(self):
        limiter = RateLimitMiddleware(app=None, calls=2, period=60)

        for _ in range(2):
            assert limiter._is_allowed("ip:10.0.0.1")
            limiter._record_request("ip:10.0.0.1")
        assert not limiter._is_allowed("ip:10.0.0.1")

        # Age the recorded requests out of the window
        window = limiter.requests["ip:10.0.0.1"]
        for i in range(len(window)):
            window[i] -= 61

        assert limiter._is_allowed("ip:10.0.0.1")
        assert "ip:10.0.0.1" not in limiter.requests


class TestMockProcessor:
    """Mock payment page (PAYMENT_PROVIDER=mock)."""

    async def test_payment_page(self, settings, database):
        app = create_api(settings, database=database, gateway=MockArtifactGateway(base_url="http://test"))

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            created = await create_payment(client, 75)
            page = await client.get(created["presentationTarget"])
            missing = await client.get("/mock-payment/qr_mock_missing")
            cancelled = await client.post(f"/mock-payment/{created['id']}/cancel")

        assert created["presentationTarget"] == f"http://test/mock-payment/{created['id']}"
        assert page.status_code == 200
        assert created["id"] in page.text
        assert "75.00" in page.text
        assert missing.status_code == 404
        assert missing.json()["code"] == "NOT_FOUND"
        assert "cancelled" in cancelled.text

    async def test_pay_sends_signed_webhook(self, settings, database):
        app = create_api(settings, database=database, gateway=MockArtifactGateway(base_url="http://test"))
        app.state.mock_webhook_transport = httpx.ASGITransport(app=app)

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            created = await create_payment(client, 75)
            result = await client.post(f"/mock-payment/{created['id']}/pay")
            status = await status_of(client, created["id"])

        assert result.status_code == 200
        assert "Payment sent" in result.text
        body = status.json()
        assert body["status"] == "SUCCESS"
        assert body["settlementReference"].startswith("pay_mock_")
        assert body["settlementReference"] in result.text

    async def test_pay_reports_failed_delivery(self, database):
        settings = make_settings(webhook_secret="whsec_other_secret")
        gateway = MockArtifactGateway(base_url="http://test")
        app = create_api(settings, database=database, gateway=gateway)
        # Webhook lands on an app holding a different secret
        receiver = create_api(make_settings(), database=database, gateway=gateway)
        app.state.mock_webhook_transport = httpx.ASGITransport(app=receiver)

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            created = await create_payment(client, 75)
            result = await client.post(f"/mock-payment/{created['id']}/pay")
            status = await status_of(client, created["id"])

        assert "Webhook delivery failed" in result.text
        assert "400" in result.text
        assert status.json() == {"status": "PENDING"}

    async def test_mock_router_only_mounted_for_mock_provider(self, database, gateway):
        settings = make_settings(
            payment_provider="razorpay_qr",
            razorpay_key_id="rzp_test_key",
            razorpay_key_secret="secret",
        )
        app = create_api(settings, database=database, gateway=gateway)

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/mock-payment/qr_anything")

        assert response.status_code == 404
