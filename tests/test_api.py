from decimal import Decimal

import httpx
import pytest
import pytest_asyncio

from conftest import APP_URI, TEST_SECRET, WALLET_A
from usdt_gateway.core.container import ApplicationContainer, get_container
from usdt_gateway.core.signing import generate_signature
from usdt_gateway.interfaces.http.deps import get_db_session
from usdt_gateway.main import create_app

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def client(settings, session_factory, wallets, rate_source, ledger, notifier, callbacks):
    container = ApplicationContainer(
        settings=settings,
        rate_source=rate_source,
        ledger=ledger,
        notifier=notifier,
        callbacks=callbacks,
    )

    async def override_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app = create_app()
    app.dependency_overrides[get_db_session] = override_session
    app.dependency_overrides[get_container] = lambda: container

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http


def _signed(**fields):
    body = {"notify_url": "https://shop.example.com/notify", **fields}
    body["signature"] = generate_signature(body, TEST_SECRET)
    return body


async def _create(client, **fields):
    return await client.post("/api/v1/order/create-transaction", json=_signed(**fields))


async def test_create_transaction(client):
    response = await _create(client, order_id="A1", amount=100, redirect_url="https://shop.example.com/ok")

    assert response.status_code == 200
    data = response.json()
    assert data["order_id"] == "A1"
    assert data["amount"] == 100.0
    assert data["currency"] == "CNY"
    assert data["actual_amount"] == 14.2857
    assert data["token"] == WALLET_A
    assert data["payment_url"] == f"{APP_URI}/pay/checkout-counter/{data['trade_id']}"
    assert isinstance(data["expiration_time"], int)


async def test_bad_signature_is_rejected(client):
    body = _signed(order_id="A1", amount=100)
    body["amount"] = 1000

    response = await client.post("/api/v1/order/create-transaction", json=body)

    assert response.status_code == 401
    assert response.json()["detail"] == "签名认证错误"


async def test_missing_signature_is_rejected(client):
    response = await client.post(
        "/api/v1/order/create-transaction",
        json={"order_id": "A1", "amount": 100, "notify_url": "https://shop.example.com/notify"},
    )

    assert response.status_code == 401


async def test_duplicate_order_id_returns_conflict(client):
    assert (await _create(client, order_id="A1", amount=100)).status_code == 200

    response = await _create(client, order_id="A1", amount=100)

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == 10002


async def test_amount_too_small_returns_error_code(client):
    response = await _create(client, order_id="A1", amount=0.001, currency="USDT")

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == 10004


async def test_rate_failure_returns_service_unavailable(client, rate_source):
    rate_source.rate = None

    response = await _create(client, order_id="A1", amount=100)

    assert response.status_code == 503
    assert response.json()["detail"]["code"] == 10006


async def test_checkout_counter_and_status(client):
    created = (await _create(client, order_id="A1", amount=100)).json()
    trade_id = created["trade_id"]

    checkout = await client.get(f"/pay/checkout-counter/{trade_id}")
    status = await client.get(f"/pay/check-status/{trade_id}")

    assert checkout.status_code == 200
    assert checkout.json()["token"] == WALLET_A
    assert Decimal(str(checkout.json()["actual_amount"])) == Decimal("14.2857")
    assert checkout.json()["expiration_time"] == created["expiration_time"]

    assert status.status_code == 200
    assert status.json() == {"trade_id": trade_id, "status": "pending", "actual_amount": 14.2857}


async def test_unknown_trade_id_returns_not_found(client):
    for path in ("/pay/checkout-counter/T-missing", "/pay/check-status/T-missing"):
        response = await client.get(path)
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == 10008


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
