from __future__ import annotations

import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from account_service.infrastructure.db.engine import create_schema, get_engine
from account_service.shared.config import get_settings
from account_service.shared.log import configure_logging


logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    configure_logging(settings.log_level)
    if not settings.postgres_dsn:
        logger.error("create_schema: missing_config key=POSTGRES_DSN")
        return 2

    try:
        create_schema(get_engine(settings.postgres_dsn))
    except SQLAlchemyError as exc:
        logger.error("create_schema: run_failed error=%s", exc)
        return 1
    logger.info("create_schema: done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
