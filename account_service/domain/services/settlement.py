from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from account_service.domain.exceptions import MalformedPaymentIdError


CENTS = Decimal("0.01")


@dataclass(frozen=True)
class PaymentId:
    """Provider-assigned payment identifier, always a positive integer."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


def parse_payment_id(raw: object) -> PaymentId:
    """Accepts the JSON number or numeric string shapes the provider sends."""
    # bool is an int subclass; True must not become payment 1
    if isinstance(raw, bool):
        raise MalformedPaymentIdError("PaymentId is of an unexpected type.")

    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not raw.is_integer():
            raise MalformedPaymentIdError("PaymentId must be an integer.")
        value = int(raw)
    elif isinstance(raw, str):
        candidate = raw.strip()
        if not candidate.isdigit() or not candidate.isascii():
            raise MalformedPaymentIdError("Invalid PaymentId format.")
        value = int(candidate)
    else:
        raise MalformedPaymentIdError("PaymentId is of an unexpected type.")

    if value <= 0:
        raise MalformedPaymentIdError("PaymentId must be positive.")
    return PaymentId(value=value)


def to_ledger_amount(amount_minor: int, *, minor_units: int = 100) -> Decimal:
    if minor_units <= 0:
        raise ValueError("minor_units must be positive.")
    return (Decimal(amount_minor) / Decimal(minor_units)).quantize(CENTS, rounding=ROUND_HALF_UP)
