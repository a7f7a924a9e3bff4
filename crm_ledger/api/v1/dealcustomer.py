"""Customer-centric views over deals."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from crm_ledger.core.dependencies import get_company_id, get_db_session
from crm_ledger.models import CustomerSortField, DealSortField, SortOrder
from crm_ledger.schemas.common import envelope
from crm_ledger.schemas.customers import CustomerDealTotalsResponse, CustomerResponse
from crm_ledger.schemas.deals import DealResponse
from crm_ledger.services.ledger_query_service import LedgerQueryService

router = APIRouter(prefix="/{companyId}/dealcustomer", tags=["dealcustomer"])


@router.get("")
def customers_with_deal_totals(
    company_id: int = Depends(get_company_id),
    page: int = Query(default=1),
    rows_per_page: int | None = Query(default=None, alias="rowsPerPage"),
    search: str | None = Query(default=None, max_length=255),
    order_by: CustomerSortField = Query(default=CustomerSortField.CREATED_AT, alias="orderBy"),
    order: SortOrder = Query(default=SortOrder.DESC),
    db: Session = Depends(get_db_session),
) -> dict:
    result = LedgerQueryService(db).list_customers_with_deal_totals(
        company_id,
        page=page,
        page_size=rows_per_page,
        search=search,
        sort_field=order_by,
        sort_order=order,
    )
    items = [
        CustomerDealTotalsResponse(
            **CustomerResponse.model_validate(row.customer).model_dump(),
            total_deal_value=row.total_deal_value,
            total_balance_amount=row.total_balance_amount,
            deal_count=row.deal_count,
        )
        for row in result.items
    ]
    return envelope(items, page=result)


@router.get("/deals")
def customer_deals(
    customer_id: int = Query(alias="customerId", ge=1),
    company_id: int = Depends(get_company_id),
    page: int = Query(default=1),
    rows_per_page: int | None = Query(default=None, alias="rowsPerPage"),
    search: str | None = Query(default=None, max_length=255),
    order_by: DealSortField = Query(default=DealSortField.CREATED_AT, alias="orderBy"),
    order: SortOrder = Query(default=SortOrder.DESC),
    db: Session = Depends(get_db_session),
) -> dict:
    result = LedgerQueryService(db).list_customer_deals(
        company_id,
        customer_id,
        page=page,
        page_size=rows_per_page,
        search=search,
        sort_field=order_by,
        sort_order=order,
    )
    return envelope([DealResponse.model_validate(deal) for deal in result.items], page=result)
