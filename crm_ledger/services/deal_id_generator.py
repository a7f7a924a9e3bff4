"""
Deal identifier generation.

Format: ``{NAME_PREFIX}{DDMM}{SEQ}``

    NAME_PREFIX  letters of the customer name, upper-cased, at most 4 characters
    DDMM         day and month of creation
    SEQ          3-digit per-customer counter for that prefix

    "Acme Corp." created on 19 Oct, third deal that day -> ACME1910003

Counters live in ``deal_sequences``, one row per (customer, prefix). A row is
created with INSERT .. ON CONFLICT DO NOTHING and advanced with a single
``UPDATE .. SET current_number = current_number + 1 RETURNING`` so two writers
can never read the same value.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from crm_ledger.core.config import get_config
from crm_ledger.core.exceptions import PersistenceError
from crm_ledger.models import Customer, Deal, DealSequence
from crm_ledger.models.base import utcnow
from crm_ledger.utils.validators import letters_only

logger = logging.getLogger(__name__)

NAME_PREFIX_LENGTH = 4
SEQUENCE_PADDING = 3
FALLBACK_NAME_PREFIX = "CUST"

_DIALECT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}
SUPPORTED_DIALECTS = frozenset(_DIALECT_INSERTS)


def name_prefix(customer_name: str | None) -> str:
    """Upper-cased letters of the name, truncated to 4; short names stay short."""
    letters = letters_only(customer_name).upper()
    return letters[:NAME_PREFIX_LENGTH] or FALLBACK_NAME_PREFIX


def date_prefix(on_date: date) -> str:
    return f"{on_date.day:02d}{on_date.month:02d}"


def format_deal_code(prefix: str, sequence_number: int) -> str:
    return f"{prefix}{str(sequence_number).zfill(SEQUENCE_PADDING)}"


class DealIdGenerator:
    """Reserve human-readable deal identifiers inside the caller's transaction."""

    def __init__(self, db: Session, timezone_name: str | None = None) -> None:
        self.db = db
        self.timezone = ZoneInfo(timezone_name or get_config().DEAL_ID_TIMEZONE)

    def today(self) -> date:
        return datetime.now(self.timezone).date()

    def next_deal_code(self, customer: Customer, on_date: date | None = None) -> str:
        """
        Reserve the next identifier for ``customer``.

        Does NOT commit: the reservation becomes durable with the caller's deal
        insert, and is released if that transaction rolls back.
        """
        prefix = f"{name_prefix(customer.customer_name)}{date_prefix(on_date or self.today())}"
        self._ensure_sequence(customer.id, prefix)

        result = self.db.execute(
            update(DealSequence)
            .where(DealSequence.customer_id == customer.id, DealSequence.prefix == prefix)
            .values(current_number=DealSequence.current_number + 1, updated_at=utcnow())
            .returning(DealSequence.current_number)
            .execution_options(synchronize_session=False)
        )
        sequence_number = result.scalar_one()
        deal_code = format_deal_code(prefix, sequence_number)
        logger.debug(
            "deal_id.reserved",
            extra={"event": "deal_id.reserved", "customer_id": customer.id, "deal_code": deal_code},
        )
        return deal_code

    def preview_next_deal_code(self, customer: Customer, on_date: date | None = None) -> str:
        """What the next identifier would be, without reserving it."""
        prefix = f"{name_prefix(customer.customer_name)}{date_prefix(on_date or self.today())}"
        current = self.db.execute(
            select(DealSequence.current_number).where(
                DealSequence.customer_id == customer.id,
                DealSequence.prefix == prefix,
            )
        ).scalar_one_or_none()
        if current is None:
            current = self._count_existing(customer.id, prefix)
        return format_deal_code(prefix, current + 1)

    def _count_existing(self, customer_id: int, prefix: str) -> int:
        return self.db.execute(
            select(func.count(Deal.id)).where(
                Deal.customer_id == customer_id,
                Deal.deal_code.startswith(prefix, autoescape=True),
            )
        ).scalar_one()

    def _ensure_sequence(self, customer_id: int, prefix: str) -> None:
        exists = self.db.execute(
            select(DealSequence.id).where(
                DealSequence.customer_id == customer_id,
                DealSequence.prefix == prefix,
            )
        ).first()
        if exists:
            return

        dialect = self.db.get_bind().dialect.name
        insert = _DIALECT_INSERTS.get(dialect)
        if insert is None:
            raise PersistenceError(f"Deal identifiers are not supported on the {dialect} backend.")

        # Seed from deals created before this counter existed.
        self.db.execute(
            insert(DealSequence)
            .values(
                customer_id=customer_id,
                prefix=prefix,
                current_number=self._count_existing(customer_id, prefix),
                updated_at=utcnow(),
            )
            .on_conflict_do_nothing(index_elements=["customer_id", "prefix"])
        )
