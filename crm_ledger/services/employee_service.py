"""Employee directory used to attribute payments."""

from __future__ import annotations

import logging

from sqlalchemy import func, or_, select

from crm_ledger.core.exceptions import NotFoundError, ValidationError
from crm_ledger.core.tenancy import enforce_company_match
from crm_ledger.models import Company, Employee
from crm_ledger.services.base_service import BaseService
from crm_ledger.services.pagination import Page, page_request
from crm_ledger.utils.validators import sanitize_text

logger = logging.getLogger(__name__)


class EmployeeService(BaseService):
    def create_employee(self, company_id: int, name: str, email: str) -> Employee:
        clean_name = sanitize_text(name, max_len=255)
        clean_email = sanitize_text(email, max_len=320).lower()
        if not clean_name or not clean_email:
            raise ValidationError("name and email are required.")
        if self.db.get(Company, company_id) is None:
            raise NotFoundError("Company not found")

        existing = self.db.execute(
            select(Employee.id).where(Employee.company_id == company_id, Employee.email == clean_email)
        ).first()
        if existing:
            raise ValidationError("An employee with this email already exists.")

        employee = Employee(company_id=company_id, name=clean_name, email=clean_email)
        self.db.add(employee)
        self.commit()
        self.db.refresh(employee)
        logger.info(
            "employee.created",
            extra={"event": "employee.created", "company_id": company_id, "employee_id": employee.id},
        )
        return employee

    def get_employee(self, company_id: int, employee_id: int) -> Employee:
        employee = self.db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee not found")
        enforce_company_match(employee.company_id, company_id, "Employee")
        return employee

    def list_employees(
        self,
        company_id: int,
        page: int | None = 1,
        page_size: int | None = None,
        search: str | None = None,
    ) -> Page[Employee]:
        request = page_request(page, page_size)
        stmt = select(Employee).where(Employee.company_id == company_id)
        if search and search.strip():
            term = search.strip()
            stmt = stmt.where(
                or_(
                    Employee.name.icontains(term, autoescape=True),
                    Employee.email.icontains(term, autoescape=True),
                )
            )
        total = self.db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
        items = self.db.execute(
            stmt.order_by(Employee.name.asc(), Employee.id.asc()).offset(request.offset).limit(request.page_size)
        ).scalars()
        return Page(items=list(items), total=total, page=request.page, page_size=request.page_size)
