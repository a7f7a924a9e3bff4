"""Employee model module."""

from __future__ import annotations

from sqlalchemy import Boolean, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from crm_ledger.models.base import AuditMixin, Base, TenantScopedMixin


class Employee(Base, AuditMixin, TenantScopedMixin):
    __tablename__ = "employees"
    __table_args__ = (UniqueConstraint("company_id", "email", name="uq_employees_company_email"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
