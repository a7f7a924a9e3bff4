"""Dependency providers for API handlers."""

from __future__ import annotations

from collections.abc import Generator

from fastapi import Path
from sqlalchemy.orm import Session

from crm_ledger.database.db import get_db
from crm_ledger.utils.validators import parse_company_id


def get_db_session() -> Generator[Session, None, None]:
    """Yield SQLAlchemy session for dependency injection."""
    yield from get_db()


def get_company_id(company_id: str = Path(alias="companyId")) -> int:
    """Resolve the tenant from the path; non-numeric ids are a 400, not a 422."""
    return parse_company_id(company_id)
