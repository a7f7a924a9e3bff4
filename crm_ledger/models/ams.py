"""Annual maintenance service (AMS) contract model module."""

from __future__ import annotations

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crm_ledger.models.base import AuditMixin, Base, TenantScopedMixin


class AmsContract(Base, AuditMixin, TenantScopedMixin):
    __tablename__ = "ams_contracts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    visit_frequency_days: Mapped[int] = mapped_column(Integer, default=90, nullable=False)
    next_visit_date: Mapped[date | None] = mapped_column(Date)

    customer = relationship("Customer", back_populates="ams_contracts")
