from __future__ import annotations

import logging
import sys

from account_service.application.use_cases.expire_stale_payments import ExpireStalePaymentsUseCase
from account_service.domain.exceptions import DomainError
from account_service.infrastructure.db.engine import get_engine
from account_service.infrastructure.db.repositories.accounts_repository import SqlAccountsRepository
from account_service.shared.config import get_settings
from account_service.shared.log import configure_logging


logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    configure_logging(settings.log_level)
    if not settings.postgres_dsn:
        logger.error("expire_stale_payments: missing_config key=POSTGRES_DSN")
        return 2

    use_case = ExpireStalePaymentsUseCase(
        ledger_port=SqlAccountsRepository(get_engine(settings.postgres_dsn)),
        invoice_ttl_days=settings.invoice_ttl_days,
    )
    try:
        output = use_case.execute()
    except DomainError as exc:
        logger.error("expire_stale_payments: run_failed error=%s", exc)
        return 1
    print(f"failed {output.expired} payments created before {output.cutoff.isoformat()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
