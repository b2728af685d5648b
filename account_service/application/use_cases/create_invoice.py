from __future__ import annotations

import logging
import time
from datetime import timedelta
from threading import Lock
from typing import Callable
from uuid import uuid4

from account_service.application.dto.billing import (
    CreateInvoiceInput,
    CreateInvoiceOutput,
    PaymentInitRequest,
)
from account_service.application.ports.accounts_port import AccountsPort
from account_service.application.ports.ledger_port import LedgerPort
from account_service.application.ports.payment_gateway_port import PaymentGatewayPort
from account_service.domain.exceptions import InvalidAmountError, UserNotFoundError

from .auth_common import utcnow


logger = logging.getLogger(__name__)

DEFAULT_INVOICE_TTL_DAYS = 4
MAX_INVOICE_AMOUNT = 100_000_000


class OrderIdGenerator:
    """Nanosecond timestamps, bumped when the clock does not move forward."""

    def __init__(self, clock: Callable[[], int] = time.time_ns):
        self._clock = clock
        self._lock = Lock()
        self._last = 0

    def next_id(self) -> str:
        with self._lock:
            value = max(self._clock(), self._last + 1)
            self._last = value
            return str(value)


class CreateInvoiceUseCase:
    def __init__(
        self,
        *,
        accounts_port: AccountsPort,
        ledger_port: LedgerPort,
        payment_gateway: PaymentGatewayPort,
        order_ids: OrderIdGenerator,
        invoice_ttl_days: int = DEFAULT_INVOICE_TTL_DAYS,
    ):
        self._accounts_port = accounts_port
        self._ledger_port = ledger_port
        self._payment_gateway = payment_gateway
        self._order_ids = order_ids
        self._invoice_ttl = timedelta(days=invoice_ttl_days)

    def execute(self, command: CreateInvoiceInput) -> CreateInvoiceOutput:
        if command.amount <= 0 or command.amount > MAX_INVOICE_AMOUNT:
            raise InvalidAmountError("amount must be a positive number of minor units.")

        user = self._accounts_port.get_user_by_id(user_id=command.user_id)
        if user is None:
            raise UserNotFoundError("User not found.")

        now = utcnow()
        order_id = self._order_ids.next_id()
        result = self._payment_gateway.init_payment(
            PaymentInitRequest(
                amount=command.amount,
                order_id=order_id,
                customer_key=user.name,
                description=f"Balance top-up for {user.name}",
                email=user.email,
                item_name=f"Balance top-up of {command.amount}",
                redirect_due_date=now + self._invoice_ttl,
            )
        )

        # must exist before the provider can confirm the payment
        self._ledger_port.create_payment(
            payment_row_id=str(uuid4()),
            payment_id=result.payment_id,
            user_id=user.id,
            amount=command.amount,
            created_at=now,
        )
        logger.info(
            "create_invoice: invoice_created user_id=%s payment_id=%s order_id=%s amount=%s",
            user.id,
            result.payment_id,
            order_id,
            command.amount,
        )
        return CreateInvoiceOutput(
            payment_id=result.payment_id,
            order_id=order_id,
            amount=command.amount,
            payment_url=result.payment_url,
            status=result.status,
        )
