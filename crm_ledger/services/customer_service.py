"""Customer directory service."""

from __future__ import annotations

import logging

from sqlalchemy import delete, func, or_, select

from crm_ledger.core.config import get_config
from crm_ledger.core.exceptions import NotFoundError, ValidationError
from crm_ledger.core.tenancy import enforce_company_match
from crm_ledger.models import AmsContract, Company, Customer, CustomerSortField, Deal, DealSequence, Payment, SortOrder
from crm_ledger.services.base_service import BaseService
from crm_ledger.services.ledger_query_service import CUSTOMER_SORT_COLUMNS, ordered_by
from crm_ledger.services.pagination import Page, page_request
from crm_ledger.utils.validators import sanitize_text

logger = logging.getLogger(__name__)


class CustomerService(BaseService):
    def create_customer(
        self,
        company_id: int,
        customer_name: str,
        email: str | None = None,
        mobile_number: str | None = None,
        address: str | None = None,
        gst_number: str | None = None,
    ) -> Customer:
        name = sanitize_text(customer_name, max_len=255)
        if not name:
            raise ValidationError("customerName is required.")
        if self.db.get(Company, company_id) is None:
            raise NotFoundError("Company not found")

        customer = Customer(
            company_id=company_id,
            customer_name=name,
            email=sanitize_text(email, max_len=320) or None,
            mobile_number=sanitize_text(mobile_number, max_len=32) or None,
            address=sanitize_text(address) or None,
            gst_number=sanitize_text(gst_number, max_len=32) or None,
        )
        self.db.add(customer)
        self.commit()
        self.db.refresh(customer)
        logger.info(
            "customer.created",
            extra={"event": "customer.created", "company_id": company_id, "customer_id": customer.id},
        )
        return customer

    def get_customer(self, company_id: int, customer_id: int) -> Customer:
        customer = self.db.get(Customer, customer_id)
        if customer is None:
            raise NotFoundError("Customer not found")
        enforce_company_match(customer.company_id, company_id, "Customer")
        return customer

    def list_customers(
        self,
        company_id: int,
        page: int | None = 1,
        page_size: int | None = None,
        search: str | None = None,
        sort_field: CustomerSortField = CustomerSortField.CREATED_AT,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> Page[Customer]:
        request = page_request(page, page_size)
        stmt = self._search_query(company_id, search)
        total = self.db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
        items = (
            self.db.execute(
                ordered_by(stmt, CUSTOMER_SORT_COLUMNS[sort_field], sort_order, Customer.id)
                .offset(request.offset)
                .limit(request.page_size)
            )
            .scalars()
            .all()
        )
        return Page(items=list(items), total=total, page=request.page, page_size=request.page_size)

    def search_customers(self, company_id: int, query: str | None, limit: int | None = None) -> list[Customer]:
        """Name-ordered lookup for pickers; an empty query returns nothing."""
        if not query or not query.strip():
            return []
        limit = limit or get_config().CUSTOMER_SEARCH_LIMIT
        stmt = self._search_query(company_id, query).order_by(Customer.customer_name.asc(), Customer.id.asc())
        return list(self.db.execute(stmt.limit(limit)).scalars().all())

    def delete_customer(self, company_id: int, customer_id: int) -> None:
        """Remove a customer together with its deals, their payments, sequences and AMS contracts."""
        customer = self.get_customer(company_id, customer_id)
        deal_ids = select(Deal.id).where(Deal.customer_id == customer.id).scalar_subquery()

        self.db.execute(delete(Payment).where(Payment.deal_id.in_(deal_ids)))
        deals_removed = self.db.execute(delete(Deal).where(Deal.customer_id == customer.id)).rowcount
        self.db.execute(delete(DealSequence).where(DealSequence.customer_id == customer.id))
        self.db.execute(delete(AmsContract).where(AmsContract.customer_id == customer.id))
        self.db.execute(delete(Customer).where(Customer.id == customer.id))
        self.commit()
        logger.info(
            "customer.deleted",
            extra={
                "event": "customer.deleted",
                "company_id": company_id,
                "customer_id": customer_id,
                "deals_removed": deals_removed,
            },
        )

    def _search_query(self, company_id: int, search: str | None):
        stmt = select(Customer).where(Customer.company_id == company_id)
        if search and search.strip():
            term = search.strip()
            stmt = stmt.where(
                or_(
                    Customer.customer_name.icontains(term, autoescape=True),
                    Customer.email.icontains(term, autoescape=True),
                    Customer.mobile_number.icontains(term, autoescape=True),
                )
            )
        return stmt
