from __future__ import annotations

import logging
from decimal import Decimal
from uuid import uuid4

from account_service.application.dto.billing import PaymentNotificationInput, PaymentNotificationOutput
from account_service.application.ports.accounts_port import AccountsPort
from account_service.application.ports.ledger_port import LedgerPort
from account_service.application.ports.notification_ports import SessionMessengerPort
from account_service.domain.entities.payment import (
    TRANSACTION_STATUS_CLOSED,
    Payment,
    is_payment_settled,
)
from account_service.domain.exceptions import DomainError, PaymentNotFoundOrSettledError
from account_service.domain.services.settlement import parse_payment_id, to_ledger_amount

from .auth_common import utcnow


logger = logging.getLogger(__name__)

TOP_UP_DESCRIPTION = "Balance top-up from bank card"
TOP_UP_MODULE = "Payment"
BALANCE_ADDED_MESSAGE = "BalanceAdded"


class ProcessPaymentNotificationUseCase:
    """Reconciles a provider confirmation into the balance exactly once."""

    def __init__(
        self,
        *,
        ledger_port: LedgerPort,
        accounts_port: AccountsPort,
        session_messenger: SessionMessengerPort,
        confirmed_status: str = "CONFIRMED",
        minor_units: int = 100,
    ):
        self._ledger_port = ledger_port
        self._accounts_port = accounts_port
        self._session_messenger = session_messenger
        self._confirmed_status = confirmed_status
        self._minor_units = minor_units

    def execute(self, command: PaymentNotificationInput) -> PaymentNotificationOutput:
        payment_id = str(parse_payment_id(command.payload.get("PaymentId")))
        status = command.payload.get("Status")

        if status != self._confirmed_status:
            logger.info("settlement: status_ignored payment_id=%s status=%s", payment_id, status)
            return PaymentNotificationOutput(payment_id=payment_id, outcome="ignored")

        def _tx(ledger_port: LedgerPort) -> tuple[Payment, Decimal] | None:
            now = utcnow()
            payment = ledger_port.claim_new_payment(payment_id=payment_id, now=now)
            if payment is None:
                return None

            credited = to_ledger_amount(payment.amount, minor_units=self._minor_units)
            ledger_port.increment_balance(user_id=payment.user_id, delta=credited, now=now)
            ledger_port.append_transaction(
                transaction_id=str(uuid4()),
                user_id=payment.user_id,
                amount=credited,
                description=TOP_UP_DESCRIPTION,
                module=TOP_UP_MODULE,
                type="profit",
                status=TRANSACTION_STATUS_CLOSED,
                created_at=now,
            )
            return payment, credited

        settled = self._ledger_port.execute_in_transaction(_tx)
        if settled is None:
            existing = self._ledger_port.get_payment_by_payment_id(payment_id=payment_id)
            if existing is not None and is_payment_settled(existing.status):
                logger.info("settlement: duplicate_confirmation payment_id=%s", payment_id)
                return PaymentNotificationOutput(payment_id=payment_id, outcome="duplicate")
            logger.warning("settlement: payment_not_found payment_id=%s", payment_id)
            raise PaymentNotFoundOrSettledError("Payment not found or status is not 'NEW'.")

        payment, credited = settled
        logger.info(
            "settlement: payment_applied payment_id=%s user_id=%s credited=%s",
            payment_id,
            payment.user_id,
            credited,
        )
        self._notify_balance_added(user_id=payment.user_id)
        return PaymentNotificationOutput(payment_id=payment_id, outcome="applied", credited_amount=credited)

    def _notify_balance_added(self, *, user_id: str) -> None:
        try:
            user = self._accounts_port.get_user_by_id(user_id=user_id)
            if user is None or not user.session:
                return
            self._session_messenger.send_personal_message(session=user.session, message=BALANCE_ADDED_MESSAGE)
        except DomainError as exc:
            # the ledger is already committed
            logger.warning("settlement: notification_failed user_id=%s error=%s", user_id, exc)
