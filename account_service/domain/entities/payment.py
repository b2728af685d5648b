from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Literal


PaymentStatus = Literal["NEW", "applied", "failed"]

PAYMENT_STATUS_NEW: PaymentStatus = "NEW"
PAYMENT_STATUS_APPLIED: PaymentStatus = "applied"
PAYMENT_STATUS_FAILED: PaymentStatus = "failed"

TRANSACTION_STATUS_CLOSED = "CLOSED_1"


@dataclass(frozen=True)
class Payment:
    id: str
    payment_id: str
    user_id: str
    # minor units, as sent to the provider
    amount: int
    status: PaymentStatus
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Billing:
    id: str
    user_id: str
    amount: Decimal
    updated_at: datetime


@dataclass(frozen=True)
class Transaction:
    id: str
    user_id: str
    total: str
    amount: Decimal
    description: str
    module: str
    type: str
    status: str
    created_at: datetime


def is_payment_settled(status: str) -> bool:
    return status == PAYMENT_STATUS_APPLIED
