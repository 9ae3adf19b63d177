import uuid

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from api import security
from api.app import FastAPIManager
from api.database import get_async_session
from api.models import PaymentStatus
from ledger.reverser import get_reversal_service
from ledger.reverser.service import ReversalService

from conftest import tenant_account


@pytest_asyncio.fixture
async def client(session, notifier):
    app = FastAPIManager().get_app()

    async def _session():
        yield session

    app.dependency_overrides[get_async_session] = _session
    app.dependency_overrides[get_reversal_service] = lambda: ReversalService(session, notifier=notifier)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://ledger.test", headers={"X-Api-Key": security.API_KEY}) as c:
        yield c


class TestServiceKey:

    async def test_health_is_public(self, client):
        response = await client.get("/check-health", headers={"X-Api-Key": "wrong"})
        assert response.status_code == 200
        assert response.json() == {"ok": True}

    async def test_wrong_key_is_rejected(self, client):
        response = await client.post(
            "/payments/confirmed",
            json={"sale_id": str(uuid.uuid4()), "total_cents": 100},
            headers={"X-Api-Key": "wrong"},
        )
        assert response.status_code == 401


class TestPaymentEvents:

    async def test_confirm_then_repeat(self, client, session, organization, make_sale):
        sale = await make_sale(10_000)
        body = {"sale_id": str(sale.id), "total_cents": 10_000}

        first = await client.post("/payments/confirmed", json=body)
        second = await client.post("/payments/confirmed", json=body)

        assert first.status_code == 200
        assert first.json()["tenant_amount_cents"] == 9_500
        assert first.json()["platform_fee_cents"] == 500
        assert second.status_code == 200
        assert second.json()["already_processed"] is True

        tenant = await tenant_account(session, organization.id)
        assert tenant.pending_balance_cents == 9_500

    async def test_confirm_unknown_sale(self, client, organization):
        response = await client.post("/payments/confirmed", json={"sale_id": str(uuid.uuid4()), "total_cents": 100})
        assert response.status_code == 404

    async def test_negative_total_is_invalid(self, client, organization, make_sale):
        sale = await make_sale(100)
        response = await client.post("/payments/confirmed", json={"sale_id": str(sale.id), "total_cents": -1})
        assert response.status_code == 422

    async def test_refund_then_repeat(self, client, organization, make_sale, notifier):
        sale = await make_sale(10_000)
        await client.post("/payments/confirmed", json={"sale_id": str(sale.id), "total_cents": 10_000})
        body = {"sale_id": str(sale.id), "amount_cents": 10_000, "reason": "customer request"}

        first = await client.post("/payments/reversals", json=body)
        second = await client.post("/payments/reversals", json=body)

        assert first.status_code == 200
        payload = first.json()
        assert payload["kind"] == "refund"
        assert payload["debited_count"] == 1
        assert payload["debited"][0]["amount_debited"] == 9_500
        assert second.status_code == 200
        assert second.json()["already_processed"] is True
        assert second.json()["debited_count"] == 0
        assert len(notifier.calls) == 1

    async def test_reversal_of_unpaid_sale_conflicts(self, client, organization, make_sale):
        sale = await make_sale(10_000, payment_status=PaymentStatus.pending)
        response = await client.post(
            "/payments/reversals", json={"sale_id": str(sale.id), "amount_cents": 10_000, "kind": "chargeback"}
        )
        assert response.status_code == 409

    async def test_reversal_of_unknown_sale(self, client, organization):
        response = await client.post("/payments/reversals", json={"sale_id": str(uuid.uuid4()), "amount_cents": 1})
        assert response.status_code == 404


class TestLedgerQueries:

    async def test_splits_transactions_and_account(self, client, session, organization, make_sale, attribute_affiliate):
        sale = await make_sale(10_000)
        affiliate = await attribute_affiliate(sale, gross_cents=1_000)
        await client.post("/payments/confirmed", json={"sale_id": str(sale.id), "total_cents": 10_000})

        splits = (await client.get(f"/ledger/sales/{sale.id}/splits")).json()
        assert {s["split_type"]: s["net_amount_cents"] for s in splits} == {
            "affiliate": 1_000,
            "tenant": 8_500,
            "platform": 500,
        }

        entries = (await client.get(f"/ledger/sales/{sale.id}/transactions")).json()
        assert sorted(e["amount_cents"] for e in entries) == [1_000, 8_500]
        assert all(e["status"] == "pending" for e in entries)

        account = await client.get(f"/ledger/accounts/{affiliate.id}")
        assert account.status_code == 200
        assert account.json()["holder_name"] == "Ana Afiliada"
        assert account.json()["pending_balance_cents"] == 1_000

    async def test_unknown_account(self, client):
        response = await client.get(f"/ledger/accounts/{uuid.uuid4()}")
        assert response.status_code == 404
