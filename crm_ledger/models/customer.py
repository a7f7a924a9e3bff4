"""Customer model module."""

from __future__ import annotations

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crm_ledger.models.base import AuditMixin, Base, TenantScopedMixin


class Customer(Base, AuditMixin, TenantScopedMixin):
    __tablename__ = "customers"
    __table_args__ = (Index("idx_customers_company_name", "company_id", "customer_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(320))
    mobile_number: Mapped[str | None] = mapped_column(String(32))
    address: Mapped[str | None] = mapped_column(Text)
    gst_number: Mapped[str | None] = mapped_column(String(32))

    deals = relationship("Deal", back_populates="customer")
    ams_contracts = relationship("AmsContract", back_populates="customer")
