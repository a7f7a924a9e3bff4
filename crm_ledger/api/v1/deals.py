"""Deal record routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from crm_ledger.core.dependencies import get_company_id, get_db_session
from crm_ledger.models import DealSortField, SortOrder
from crm_ledger.schemas.common import envelope
from crm_ledger.schemas.deals import DealCreateRequest, DealResponse, DealUpdateRequest, IdRequest
from crm_ledger.services.deal_service import DealService
from crm_ledger.services.ledger_query_service import LedgerQueryService
from crm_ledger.services.report_service import ReportService

router = APIRouter(prefix="/{companyId}/deals", tags=["deals"])


@router.get("")
def list_deals(
    company_id: int = Depends(get_company_id),
    page: int = Query(default=1),
    rows_per_page: int | None = Query(default=None, alias="rowsPerPage"),
    page_size: int | None = Query(default=None, alias="pageSize"),
    search: str | None = Query(default=None, max_length=255),
    order_by: DealSortField = Query(default=DealSortField.DEAL_ID, alias="orderBy"),
    order: SortOrder = Query(default=SortOrder.ASC),
    db: Session = Depends(get_db_session),
) -> dict:
    result = LedgerQueryService(db).list_deals(
        company_id,
        page=page,
        page_size=rows_per_page if rows_per_page is not None else page_size,
        search=search,
        sort_field=order_by,
        sort_order=order,
    )
    return envelope([DealResponse.model_validate(deal) for deal in result.items], page=result)


@router.post("", status_code=201)
def create_deal(
    payload: DealCreateRequest,
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_db_session),
) -> JSONResponse:
    deal = DealService(db).create_deal(
        company_id,
        customer_id=payload.customer_id,
        requirement=payload.requirement,
        deal_value=payload.deal_value,
        deal_approval_value=payload.deal_approval_value,
        advance_payment=payload.advance_payment,
        balance_amount=payload.balance_amount,
    )
    return JSONResponse(
        status_code=201,
        content=envelope(DealResponse.model_validate(deal), message="Deal created successfully"),
    )


@router.put("")
def update_deal(
    payload: DealUpdateRequest,
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_db_session),
) -> dict:
    deal = DealService(db).update_deal(
        company_id,
        payload.id,
        requirement=payload.requirement,
        deal_value=payload.deal_value,
        deal_approval_value=payload.deal_approval_value,
        advance_payment=payload.advance_payment,
    )
    return envelope(DealResponse.model_validate(deal), message="Deal updated successfully")


@router.delete("")
def delete_deal(
    payload: IdRequest,
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_db_session),
) -> dict:
    DealService(db).delete_deal(company_id, payload.id)
    return envelope(message="Deal deleted successfully")


@router.get("/export")
def export_deals(
    company_id: int = Depends(get_company_id),
    search: str | None = Query(default=None, max_length=255),
    order_by: DealSortField = Query(default=DealSortField.DEAL_ID, alias="orderBy"),
    order: SortOrder = Query(default=SortOrder.ASC),
    db: Session = Depends(get_db_session),
) -> Response:
    csv_text = ReportService(db).export_deals_csv(company_id, search=search, sort_field=order_by, sort_order=order)
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="deals-{company_id}.csv"'},
    )
