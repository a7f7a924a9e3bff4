"""Startup validation and bootstrap helpers."""

from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine, make_url

from crm_ledger.core.config import get_config
from crm_ledger.core.exceptions import ConfigurationError
from crm_ledger.core.logging_config import configure_logging
from crm_ledger.database.db import get_active_database_url, get_engine, verify_database_connection
from crm_ledger.models import Base
from crm_ledger.services.deal_id_generator import SUPPORTED_DIALECTS

logger = logging.getLogger(__name__)


def missing_ledger_tables(engine: Engine) -> list[str]:
    """Ledger tables the bound database does not have yet."""
    existing = set(inspect(engine).get_table_names())
    return sorted(name for name in Base.metadata.tables if name not in existing)


def validate_startup_config() -> None:
    """Fail-fast config and connectivity checks."""
    config = get_config()
    active_database_url = get_active_database_url()
    dialect = make_url(active_database_url).get_backend_name()
    if dialect not in SUPPORTED_DIALECTS:
        raise ConfigurationError(f"Deal identifiers cannot be issued on the {dialect} backend.")

    database_ok = verify_database_connection()
    if not database_ok and config.DB_CONNECTIVITY_REQUIRED:
        raise RuntimeError("Database connectivity check failed.")
    if not database_ok:
        logger.warning(
            "startup.database.connectivity_optional_failed",
            extra={"event": "startup.database.connectivity_optional_failed"},
        )
    else:
        missing = missing_ledger_tables(get_engine())
        if missing:
            logger.warning(
                "startup.database.schema_incomplete",
                extra={"event": "startup.database.schema_incomplete", "missing_tables": missing},
            )

    if config.is_production and dialect == "sqlite":
        logger.warning(
            "startup.production.sqlite_detected",
            extra={"event": "startup.production.sqlite_detected"},
        )

    logger.info(
        "startup.config.validated",
        extra={
            "event": "startup.config.validated",
            "env": config.ENV,
            "database_backend": dialect,
            "db_connectivity_required": config.DB_CONNECTIVITY_REQUIRED,
            "deal_id_timezone": config.DEAL_ID_TIMEZONE,
            "max_page_size": config.MAX_PAGE_SIZE,
        },
    )


def bootstrap() -> None:
    """Initialize logging and validate runtime configuration."""
    configure_logging()
    validate_startup_config()
