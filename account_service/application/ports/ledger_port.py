from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Callable, Protocol, TypeVar

from account_service.domain.entities.payment import Billing, Payment, Transaction


TLedgerResult = TypeVar("TLedgerResult")


class LedgerPort(Protocol):
    def execute_in_transaction(self, fn: Callable[[LedgerPort], TLedgerResult]) -> TLedgerResult:
        ...

    def create_payment(
        self,
        *,
        payment_row_id: str,
        payment_id: str,
        user_id: str,
        amount: int,
        created_at: datetime,
    ) -> Payment:
        ...

    def get_payment_by_payment_id(self, *, payment_id: str) -> Payment | None:
        ...

    def claim_new_payment(self, *, payment_id: str, now: datetime) -> Payment | None:
        """Compare-and-set NEW -> applied; None when no NEW row matched."""
        ...

    def fail_stale_payments(self, *, created_before: datetime, now: datetime) -> int:
        ...

    def get_billing(self, *, user_id: str) -> Billing | None:
        ...

    def increment_balance(self, *, user_id: str, delta: Decimal, now: datetime) -> Decimal:
        ...

    def append_transaction(
        self,
        *,
        transaction_id: str,
        user_id: str,
        amount: Decimal,
        description: str,
        module: str,
        type: str,
        status: str,
        created_at: datetime,
    ) -> Transaction:
        ...
