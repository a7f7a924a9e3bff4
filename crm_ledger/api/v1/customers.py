"""Customer directory routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from crm_ledger.core.dependencies import get_company_id, get_db_session
from crm_ledger.models import CustomerSortField, SortOrder
from crm_ledger.schemas.common import envelope
from crm_ledger.schemas.customers import CustomerCreateRequest, CustomerResponse
from crm_ledger.schemas.deals import IdRequest
from crm_ledger.services.customer_service import CustomerService

router = APIRouter(prefix="/{companyId}/customers", tags=["customers"])


@router.get("")
def list_customers(
    company_id: int = Depends(get_company_id),
    page: int = Query(default=1),
    rows_per_page: int | None = Query(default=None, alias="rowsPerPage"),
    search: str | None = Query(default=None, max_length=255),
    order_by: CustomerSortField = Query(default=CustomerSortField.CREATED_AT, alias="orderBy"),
    order: SortOrder = Query(default=SortOrder.DESC),
    db: Session = Depends(get_db_session),
) -> dict:
    result = CustomerService(db).list_customers(
        company_id,
        page=page,
        page_size=rows_per_page,
        search=search,
        sort_field=order_by,
        sort_order=order,
    )
    return envelope([CustomerResponse.model_validate(row) for row in result.items], page=result)


@router.get("/search")
def search_customers(
    query: str | None = Query(default=None, max_length=255),
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_db_session),
) -> dict:
    rows = CustomerService(db).search_customers(company_id, query)
    return envelope([CustomerResponse.model_validate(row) for row in rows])


@router.post("", status_code=201)
def create_customer(
    payload: CustomerCreateRequest,
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_db_session),
) -> JSONResponse:
    customer = CustomerService(db).create_customer(company_id, **payload.model_dump())
    return JSONResponse(
        status_code=201,
        content=envelope(CustomerResponse.model_validate(customer), message="Customer created successfully"),
    )


@router.delete("")
def delete_customer(
    payload: IdRequest,
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_db_session),
) -> dict:
    CustomerService(db).delete_customer(company_id, payload.id)
    return envelope(message="Customer deleted successfully")
