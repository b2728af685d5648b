from __future__ import annotations

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from account_service.api.deps import (
    get_create_invoice_use_case,
    get_current_user,
    get_notification_verifier,
    get_process_payment_notification_use_case,
)
from account_service.application.use_cases.create_invoice import CreateInvoiceUseCase, OrderIdGenerator
from account_service.application.use_cases.process_payment_notification import (
    ProcessPaymentNotificationUseCase,
)
from account_service.infrastructure.clients.tinkoff_client import TinkoffClient, TinkoffClientSettings
from account_service.main import app
from tests.fakes import FakeAccountStore, FakePaymentGateway, FakeSessionMessenger, make_payment, make_user


@pytest.fixture
def store() -> FakeAccountStore:
    store = FakeAccountStore()
    store.add_user(make_user(session="sess-1"))
    payment = make_payment()
    store.payments[payment.payment_id] = payment
    return store


@pytest.fixture
def client(store: FakeAccountStore):
    app.dependency_overrides[get_process_payment_notification_use_case] = lambda: ProcessPaymentNotificationUseCase(
        ledger_port=store,
        accounts_port=store,
        session_messenger=FakeSessionMessenger(),
    )
    app.dependency_overrides[get_notification_verifier] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_confirmed_notification_returns_success_and_credits_once(client: TestClient, store: FakeAccountStore):
    first = client.post("/api/payments/notification", json={"PaymentId": 1001, "Status": "CONFIRMED"})
    second = client.post("/api/payments/notification", json={"PaymentId": "1001", "Status": "CONFIRMED"})

    assert first.status_code == 200
    assert first.json() == {
        "status": "success",
        "data": {"payment_id": "1001", "outcome": "applied", "credited_amount": "150.00"},
    }
    assert second.status_code == 200
    assert second.json()["data"]["outcome"] == "duplicate"
    assert store.billings["user-1"].amount == Decimal("150.00")


def test_unknown_payment_is_404(client: TestClient):
    response = client.post("/api/payments/notification", json={"PaymentId": 42, "Status": "CONFIRMED"})

    assert response.status_code == 404
    assert response.json() == {"status": "error", "message": "Payment not found or status is not 'NEW'."}


def test_malformed_payment_id_is_400(client: TestClient):
    response = client.post("/api/payments/notification", json={"PaymentId": [1], "Status": "CONFIRMED"})

    assert response.status_code == 400
    assert response.json()["status"] == "error"


def test_unparseable_body_is_400(client: TestClient):
    response = client.post(
        "/api/payments/notification",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["message"].startswith("Failed to parse request body")


def test_non_confirmed_status_is_acknowledged(client: TestClient, store: FakeAccountStore):
    response = client.post("/api/payments/notification", json={"PaymentId": 1001, "Status": "AUTHORIZED"})

    assert response.status_code == 200
    assert response.json()["data"]["outcome"] == "ignored"
    assert store.payments["1001"].status == "NEW"


def test_storage_failure_is_500_so_provider_redelivers(client: TestClient, store: FakeAccountStore):
    store.fail_on.add("append_transaction")

    response = client.post("/api/payments/notification", json={"PaymentId": 1001, "Status": "CONFIRMED"})

    assert response.status_code == 500
    assert response.json() == {"status": "error", "message": "Failed to settle payment."}
    assert store.payments["1001"].status == "NEW"


def test_notification_with_bad_token_is_rejected(client: TestClient, store: FakeAccountStore):
    app.dependency_overrides[get_notification_verifier] = lambda: (lambda *, payload: False)

    response = client.post("/api/payments/notification", json={"PaymentId": 1001, "Status": "CONFIRMED"})

    assert response.status_code == 401
    assert store.payments["1001"].status == "NEW"


def test_create_invoice_returns_payment_url(client: TestClient, store: FakeAccountStore):
    app.dependency_overrides[get_current_user] = lambda: store.users["user-1"]
    app.dependency_overrides[get_create_invoice_use_case] = lambda: CreateInvoiceUseCase(
        accounts_port=store,
        ledger_port=store,
        payment_gateway=FakePaymentGateway(),
        order_ids=OrderIdGenerator(),
    )

    response = client.post("/api/payments/invoice", json={"amount": 15000})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert body["data"]["payment_id"] == "555001"
    assert body["data"]["payment_url"] == "https://securepay.tinkoff.ru/new/abc"
    assert store.payments["555001"].status == "NEW"


def test_create_invoice_rejects_non_positive_amount(client: TestClient, store: FakeAccountStore):
    app.dependency_overrides[get_current_user] = lambda: store.users["user-1"]
    app.dependency_overrides[get_create_invoice_use_case] = lambda: CreateInvoiceUseCase(
        accounts_port=store,
        ledger_port=store,
        payment_gateway=FakePaymentGateway(),
        order_ids=OrderIdGenerator(),
    )

    response = client.post("/api/payments/invoice", json={"amount": 0})

    assert response.status_code == 422


def test_non_ascii_callback_token_is_rejected_not_crashed(client: TestClient, store: FakeAccountStore):
    gateway = TinkoffClient(
        TinkoffClientSettings(
            api_base="https://securepay.tinkoff.ru/v2",
            terminal_key="TerminalDEMO",
            password="secret",
            timeout_seconds=10,
        )
    )
    app.dependency_overrides[get_notification_verifier] = lambda: gateway.verify_notification

    response = client.post(
        "/api/payments/notification",
        json={"TerminalKey": "TerminalDEMO", "PaymentId": 1001, "Status": "CONFIRMED", "Token": "éabc"},
    )

    assert response.status_code == 401
    assert store.payments["1001"].status == "NEW"
