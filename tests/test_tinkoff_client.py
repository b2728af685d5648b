from __future__ import annotations

import hashlib
from datetime import datetime, timezone

import httpx
import pytest

from account_service.application.dto.billing import PaymentInitRequest
from account_service.domain.exceptions import PaymentProviderError
from account_service.infrastructure.clients import tinkoff_client
from account_service.infrastructure.clients.tinkoff_client import (
    TinkoffClient,
    TinkoffClientSettings,
    build_token,
)


def _make_client() -> TinkoffClient:
    return TinkoffClient(
        TinkoffClientSettings(
            api_base="https://securepay.tinkoff.ru/v2/",
            terminal_key="TerminalDEMO",
            password="secret",
            timeout_seconds=10,
        )
    )


def _request() -> PaymentInitRequest:
    return PaymentInitRequest(
        amount=15000,
        order_id="1700000000000000000",
        customer_key="Ivanov Ivan",
        description="Balance top-up for Ivanov Ivan",
        email="ivan@example.com",
        item_name="Balance top-up of 15000",
        redirect_due_date=datetime(2026, 3, 5, 12, 0, tzinfo=timezone.utc),
    )


def test_build_token_sorts_root_scalars_and_includes_password():
    params = {
        "TerminalKey": "TerminalDEMO",
        "Amount": 19200,
        "OrderId": "21050",
        "Description": "Gift card",
        "Receipt": {"Email": "a@b.c"},
        "DATA": {"Phone": "+7"},
        "Token": "ignored",
    }

    expected = hashlib.sha256("19200Gift card21050secretTerminalDEMO".encode("utf-8")).hexdigest()

    assert build_token(params, "secret") == expected


def test_build_token_renders_booleans_lowercase():
    expected = hashlib.sha256("secretfalse".encode("utf-8")).hexdigest()
    assert build_token({"Success": False}, "secret") == expected


def test_init_payment_posts_signed_body_with_receipt(monkeypatch: pytest.MonkeyPatch):
    client = _make_client()
    captured: dict = {}

    def fake_post(*, path: str, body: dict) -> dict:
        captured["path"] = path
        captured["body"] = body
        return {
            "Success": True,
            "ErrorCode": "0",
            "Status": "NEW",
            "PaymentId": 3093639567,
            "OrderId": body["OrderId"],
            "Amount": body["Amount"],
            "PaymentURL": "https://securepay.tinkoff.ru/new/abc",
        }

    monkeypatch.setattr(client, "_post", fake_post)

    result = client.init_payment(_request())

    assert result.payment_id == "3093639567"
    assert result.payment_url == "https://securepay.tinkoff.ru/new/abc"
    assert captured["path"] == "/Init"
    body = captured["body"]
    assert body["TerminalKey"] == "TerminalDEMO"
    assert body["RedirectDueDate"] == "2026-03-05T12:00:00+00:00"
    assert body["Receipt"]["Taxation"] == "usn_income"
    assert body["Receipt"]["Payments"] == {"Electronic": 15000}
    [item] = body["Receipt"]["Items"]
    assert item["Price"] == 15000
    assert item["Tax"] == "none"
    assert item["PaymentObject"] == "intellectual_activity"
    unsigned = {key: value for key, value in body.items() if key != "Token"}
    assert body["Token"] == build_token(unsigned, "secret")


def test_init_payment_rejection_raises_provider_error(monkeypatch: pytest.MonkeyPatch):
    client = _make_client()
    monkeypatch.setattr(
        client,
        "_post",
        lambda *, path, body: {"Success": False, "ErrorCode": "204", "Message": "Invalid token"},
    )

    with pytest.raises(PaymentProviderError):
        client.init_payment(_request())


def test_transport_error_is_wrapped(monkeypatch: pytest.MonkeyPatch):
    client = _make_client()

    def broken_post(*args, **kwargs):
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(tinkoff_client.httpx, "post", broken_post)

    with pytest.raises(PaymentProviderError):
        client.init_payment(_request())


def test_verify_notification_accepts_only_matching_token():
    client = _make_client()
    payload = {
        "TerminalKey": "TerminalDEMO",
        "OrderId": "21050",
        "Success": True,
        "Status": "CONFIRMED",
        "PaymentId": 13660,
        "ErrorCode": "0",
        "Amount": 100000,
    }
    payload["Token"] = build_token(payload, "secret")

    assert client.verify_notification(payload=payload) is True
    assert client.verify_notification(payload={**payload, "Amount": 999999}) is False
    assert client.verify_notification(payload={**payload, "Token": ""}) is False
    assert client.verify_notification(payload={**payload, "TerminalKey": "Other"}) is False


def test_verify_notification_rejects_non_ascii_token():
    client = _make_client()
    payload = {"TerminalKey": "TerminalDEMO", "PaymentId": 13660, "Status": "CONFIRMED"}
    token = build_token(payload, "secret")

    assert client.verify_notification(payload={**payload, "Token": "é" + token[1:]}) is False
    assert client.verify_notification(payload={**payload, "Token": "éabc"}) is False
