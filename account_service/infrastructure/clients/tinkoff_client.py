from __future__ import annotations

from dataclasses import dataclass
import hashlib
import hmac
import logging

import httpx

from account_service.application.dto.billing import PaymentInitRequest, PaymentInitResult
from account_service.application.ports.payment_gateway_port import PaymentGatewayPort
from account_service.domain.exceptions import PaymentProviderError


logger = logging.getLogger(__name__)

# nested objects never take part in the request signature
UNSIGNED_FIELDS = {"Token", "Receipt", "DATA", "Data"}


@dataclass(frozen=True)
class TinkoffClientSettings:
    api_base: str
    terminal_key: str
    password: str
    timeout_seconds: float


def build_token(params: dict, password: str) -> str:
    """SHA-256 over the sorted root scalar values with the terminal password mixed in."""
    signed: dict[str, str] = {"Password": password}
    for key, value in params.items():
        if key in UNSIGNED_FIELDS or value is None or isinstance(value, (dict, list)):
            continue
        signed[key] = _scalar(value)
    joined = "".join(signed[key] for key in sorted(signed))
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()


def _scalar(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class TinkoffClient(PaymentGatewayPort):
    def __init__(self, settings: TinkoffClientSettings):
        self._settings = settings

    def init_payment(self, request: PaymentInitRequest) -> PaymentInitResult:
        body = {
            "TerminalKey": self._settings.terminal_key,
            "Amount": request.amount,
            "OrderId": request.order_id,
            "Description": request.description,
            "CustomerKey": request.customer_key,
            "RedirectDueDate": request.redirect_due_date.isoformat(timespec="seconds"),
            "Receipt": {
                "Email": request.email,
                "Taxation": "usn_income",
                "Items": [
                    {
                        "Name": request.item_name,
                        "Price": request.amount,
                        "Quantity": 1,
                        "Amount": request.amount,
                        "Tax": "none",
                        "PaymentMethod": "full_payment",
                        "PaymentObject": "intellectual_activity",
                    }
                ],
                "Payments": {"Electronic": request.amount},
            },
        }
        body["Token"] = build_token(body, self._settings.password)

        data = self._post(path="/Init", body=body)
        if not data.get("Success"):
            logger.warning(
                "tinkoff_client: init_rejected order_id=%s error_code=%s message=%s",
                request.order_id,
                data.get("ErrorCode"),
                data.get("Message"),
            )
            raise PaymentProviderError(
                f"Payment provider rejected the invoice: {data.get('Message') or data.get('ErrorCode')}"
            )

        payment_id = data.get("PaymentId")
        if payment_id in (None, ""):
            raise PaymentProviderError("Payment provider response has no PaymentId.")

        return PaymentInitResult(
            payment_id=str(payment_id),
            order_id=str(data.get("OrderId") or request.order_id),
            amount=int(data.get("Amount") or request.amount),
            status=str(data.get("Status") or "NEW"),
            payment_url=data.get("PaymentURL"),
        )

    def verify_notification(self, *, payload: dict) -> bool:
        token = payload.get("Token")
        if not isinstance(token, str) or not token:
            return False
        if payload.get("TerminalKey") != self._settings.terminal_key:
            return False
        expected = build_token(payload, self._settings.password)
        # compared as bytes; a non-ASCII token is just a mismatch
        return hmac.compare_digest(expected.encode("ascii"), token.lower().encode("utf-8"))

    def _post(self, *, path: str, body: dict) -> dict:
        url = f"{self._settings.api_base.rstrip('/')}{path}"
        try:
            response = httpx.post(url, json=body, timeout=self._settings.timeout_seconds)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            logger.warning("tinkoff_client: request_failed path=%s error=%s", path, exc)
            raise PaymentProviderError("Payment provider request failed.") from exc
        except ValueError as exc:
            raise PaymentProviderError("Payment provider returned invalid JSON.") from exc

        if not isinstance(data, dict):
            raise PaymentProviderError("Payment provider returned an unexpected payload.")
        return data
