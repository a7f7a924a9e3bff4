"""Read-side queries over deals, customers and payment history."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import func, or_, select
from sqlalchemy.orm import contains_eager, selectinload
from sqlalchemy.sql import Select

from crm_ledger.core.exceptions import NotFoundError
from crm_ledger.core.tenancy import enforce_company_match
from crm_ledger.models import Customer, CustomerSortField, Deal, DealSortField, Payment, SortOrder
from crm_ledger.services.base_service import BaseService
from crm_ledger.services.pagination import Page, page_request
from crm_ledger.utils.validators import to_money

DEAL_SORT_COLUMNS = {
    DealSortField.DEAL_ID: Deal.deal_code,
    DealSortField.CREATED_AT: Deal.created_at,
    DealSortField.DEAL_VALUE: Deal.deal_value,
    DealSortField.DEAL_APPROVAL_VALUE: Deal.deal_approval_value,
    DealSortField.ADVANCE_PAYMENT: Deal.advance_payment,
    DealSortField.BALANCE_AMOUNT: Deal.balance_amount,
    DealSortField.REQUIREMENT: Deal.requirement,
    DealSortField.CUSTOMER_NAME: Customer.customer_name,
}

CUSTOMER_SORT_COLUMNS = {
    CustomerSortField.CREATED_AT: Customer.created_at,
    CustomerSortField.CUSTOMER_NAME: Customer.customer_name,
    CustomerSortField.EMAIL: Customer.email,
}


@dataclass
class CustomerDealTotals:
    customer: Customer
    total_deal_value: Decimal
    total_balance_amount: Decimal
    deal_count: int


@dataclass
class PaymentHistoryEntry:
    payment: Payment
    balance_after: Decimal


@dataclass
class PaymentHistory:
    deal: Deal
    entries: list[PaymentHistoryEntry]
    total_paid: Decimal

    @property
    def balance_amount(self) -> Decimal:
        return self.deal.balance_amount


def ordered_by(stmt: Select, column, sort_order: SortOrder, tiebreaker) -> Select:
    if sort_order is SortOrder.DESC:
        return stmt.order_by(column.desc(), tiebreaker.desc())
    return stmt.order_by(column.asc(), tiebreaker.asc())


class LedgerQueryService(BaseService):
    """Paginated listings; every query is pinned to one company."""

    def list_deals(
        self,
        company_id: int,
        page: int | None = 1,
        page_size: int | None = None,
        search: str | None = None,
        sort_field: DealSortField = DealSortField.DEAL_ID,
        sort_order: SortOrder = SortOrder.ASC,
        customer_id: int | None = None,
    ) -> Page[Deal]:
        request = page_request(page, page_size)
        stmt = self._deal_query(company_id, search, customer_id)
        total = self.db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
        items = (
            self.db.execute(
                ordered_by(stmt, DEAL_SORT_COLUMNS[sort_field], sort_order, Deal.id)
                .options(contains_eager(Deal.customer))
                .offset(request.offset)
                .limit(request.page_size)
            )
            .scalars()
            .all()
        )
        return Page(items=list(items), total=total, page=request.page, page_size=request.page_size)

    def all_deals(
        self,
        company_id: int,
        search: str | None = None,
        sort_field: DealSortField = DealSortField.DEAL_ID,
        sort_order: SortOrder = SortOrder.ASC,
    ) -> list[Deal]:
        stmt = ordered_by(self._deal_query(company_id, search), DEAL_SORT_COLUMNS[sort_field], sort_order, Deal.id)
        stmt = stmt.options(contains_eager(Deal.customer))
        return list(self.db.execute(stmt).scalars().all())

    def list_customer_deals(
        self,
        company_id: int,
        customer_id: int,
        page: int | None = 1,
        page_size: int | None = None,
        search: str | None = None,
        sort_field: DealSortField = DealSortField.CREATED_AT,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> Page[Deal]:
        customer = self.db.get(Customer, customer_id)
        if customer is None:
            raise NotFoundError("Customer not found")
        enforce_company_match(customer.company_id, company_id, "Customer")
        return self.list_deals(company_id, page, page_size, search, sort_field, sort_order, customer_id=customer.id)

    def list_customers_with_deal_totals(
        self,
        company_id: int,
        page: int | None = 1,
        page_size: int | None = None,
        search: str | None = None,
        sort_field: CustomerSortField = CustomerSortField.CREATED_AT,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> Page[CustomerDealTotals]:
        """Customers holding at least one deal, with summed value and outstanding balance."""
        request = page_request(page, page_size)
        totals = (
            select(
                Deal.customer_id.label("customer_id"),
                func.sum(Deal.deal_value).label("total_deal_value"),
                func.sum(Deal.balance_amount).label("total_balance_amount"),
                func.count(Deal.id).label("deal_count"),
            )
            .where(Deal.company_id == company_id)
            .group_by(Deal.customer_id)
            .subquery()
        )
        stmt = (
            select(Customer, totals.c.total_deal_value, totals.c.total_balance_amount, totals.c.deal_count)
            .join(totals, totals.c.customer_id == Customer.id)
            .where(Customer.company_id == company_id)
        )
        if search and search.strip():
            term = search.strip()
            stmt = stmt.where(
                or_(
                    Customer.customer_name.icontains(term, autoescape=True),
                    Customer.email.icontains(term, autoescape=True),
                    Customer.mobile_number.icontains(term, autoescape=True),
                )
            )

        total = self.db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
        rows = self.db.execute(
            ordered_by(stmt, CUSTOMER_SORT_COLUMNS[sort_field], sort_order, Customer.id)
            .offset(request.offset)
            .limit(request.page_size)
        ).all()
        items = [
            CustomerDealTotals(
                customer=customer,
                total_deal_value=to_money(deal_total),
                total_balance_amount=to_money(balance_total),
                deal_count=int(deal_count),
            )
            for customer, deal_total, balance_total, deal_count in rows
        ]
        return Page(items=items, total=total, page=request.page, page_size=request.page_size)

    def get_payment_history(self, company_id: int, deal_id: int) -> PaymentHistory:
        """
        Payments of one deal, newest first, each with the balance left after it.

        The running balance is walked in chronological order (payment date, then
        id) starting from the approved value, then the list is reversed.
        """
        deal = self.db.get(Deal, deal_id)
        if deal is None:
            raise NotFoundError("Deal not found")
        enforce_company_match(deal.company_id, company_id, "Deal")

        payments = self.db.execute(
            select(Payment)
            .options(selectinload(Payment.created_by))
            .where(Payment.deal_id == deal_id)
            .order_by(Payment.payment_date.asc(), Payment.id.asc())
        ).scalars()

        running = deal.deal_approval_value
        total_paid = Decimal("0.00")
        entries: list[PaymentHistoryEntry] = []
        for payment in payments:
            running -= payment.amount
            total_paid += payment.amount
            entries.append(PaymentHistoryEntry(payment=payment, balance_after=to_money(running)))
        entries.reverse()
        return PaymentHistory(deal=deal, entries=entries, total_paid=to_money(total_paid))

    def _deal_query(self, company_id: int, search: str | None, customer_id: int | None = None) -> Select:
        stmt = (
            select(Deal)
            .join(Deal.customer)
            .where(Deal.company_id == company_id)
        )
        if customer_id is not None:
            stmt = stmt.where(Deal.customer_id == customer_id)
        if search and search.strip():
            term = search.strip()
            stmt = stmt.where(
                or_(
                    Deal.deal_code.icontains(term, autoescape=True),
                    Customer.customer_name.icontains(term, autoescape=True),
                    Deal.requirement.icontains(term, autoescape=True),
                )
            )
        return stmt
