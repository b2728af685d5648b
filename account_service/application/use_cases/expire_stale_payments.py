from __future__ import annotations

import logging
from datetime import datetime, timedelta

from account_service.application.dto.billing import ExpireStalePaymentsOutput
from account_service.application.ports.ledger_port import LedgerPort

from .auth_common import utcnow


logger = logging.getLogger(__name__)


class ExpireStalePaymentsUseCase:
    """Moves invoices nobody confirmed before their due date from NEW to failed."""

    def __init__(self, *, ledger_port: LedgerPort, invoice_ttl_days: int):
        if invoice_ttl_days <= 0:
            raise ValueError("invoice_ttl_days must be positive.")
        self._ledger_port = ledger_port
        self._invoice_ttl = timedelta(days=invoice_ttl_days)

    def execute(self, *, now: datetime | None = None) -> ExpireStalePaymentsOutput:
        now = now or utcnow()
        cutoff = now - self._invoice_ttl
        expired = self._ledger_port.fail_stale_payments(created_before=cutoff, now=now)
        logger.info("expire_stale_payments: payments_failed count=%s cutoff=%s", expired, cutoff.isoformat())
        return ExpireStalePaymentsOutput(expired=expired, cutoff=cutoff)
