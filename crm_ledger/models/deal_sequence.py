"""Per-customer, per-day counter backing deal identifiers."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from crm_ledger.models.base import Base, utcnow


class DealSequence(Base):
    """
    Last issued sequence number for one ``NAME_PREFIX + DDMM`` prefix of one customer.

    Example:
        customer_id = 7, prefix = "ACME1910", current_number = 2
        -> next deal identifier: ACME1910003
    """

    __tablename__ = "deal_sequences"
    __table_args__ = (UniqueConstraint("customer_id", "prefix", name="uq_deal_sequences_customer_prefix"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    prefix: Mapped[str] = mapped_column(String(16), nullable=False)
    current_number: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<DealSequence(customer={self.customer_id}, {self.prefix}: {self.current_number})>"
