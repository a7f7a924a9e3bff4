"""Deal model module."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crm_ledger.models.base import AuditMixin, Base, TenantScopedMixin


class Deal(Base, AuditMixin, TenantScopedMixin):
    __tablename__ = "deals"
    __table_args__ = (
        UniqueConstraint("customer_id", "deal_code", name="uq_deals_customer_code"),
        Index("idx_deals_company_code", "company_id", "deal_code"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    deal_code: Mapped[str] = mapped_column(String(32), nullable=False)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True)
    requirement: Mapped[str | None] = mapped_column(Text)
    deal_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    deal_approval_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    advance_payment: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    # Only ledger writes touch this column; see PaymentLedgerService.
    balance_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)

    customer = relationship("Customer", back_populates="deals")
    payments = relationship(
        "Payment", back_populates="deal", cascade="all, delete-orphan", order_by="Payment.payment_date"
    )
