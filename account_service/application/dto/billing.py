from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Literal


SettlementOutcome = Literal["applied", "duplicate", "ignored"]


@dataclass(frozen=True)
class CreateInvoiceInput:
    user_id: str
    amount: int


@dataclass(frozen=True)
class CreateInvoiceOutput:
    payment_id: str
    order_id: str
    amount: int
    payment_url: str | None
    status: str


@dataclass(frozen=True)
class PaymentInitRequest:
    amount: int
    order_id: str
    customer_key: str
    description: str
    email: str
    item_name: str
    redirect_due_date: datetime


@dataclass(frozen=True)
class PaymentInitResult:
    payment_id: str
    order_id: str
    amount: int
    status: str
    payment_url: str | None


@dataclass(frozen=True)
class PaymentNotificationInput:
    payload: dict


@dataclass(frozen=True)
class PaymentNotificationOutput:
    payment_id: str
    outcome: SettlementOutcome
    credited_amount: Decimal | None = None


@dataclass(frozen=True)
class ExpireStalePaymentsOutput:
    expired: int
    cutoff: datetime
