"""Payment model module."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Index, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crm_ledger.models.base import AuditMixin, Base
from crm_ledger.models.enums import PaymentType


class Payment(Base, AuditMixin):
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        Index("idx_payments_deal_date", "deal_id", "payment_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    deal_id: Mapped[int] = mapped_column(ForeignKey("deals.id", ondelete="RESTRICT"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    payment_type: Mapped[PaymentType] = mapped_column(
        Enum(
            PaymentType,
            native_enum=False,
            length=40,
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
    )
    remarks: Mapped[str] = mapped_column(Text, default="", nullable=False)
    created_by_id: Mapped[int | None] = mapped_column(ForeignKey("employees.id", ondelete="SET NULL"))

    deal = relationship("Deal", back_populates="payments")
    created_by = relationship("Employee")
