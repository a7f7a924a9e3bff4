"""Payment ledger routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from crm_ledger.core.dependencies import get_company_id, get_db_session
from crm_ledger.schemas.common import envelope
from crm_ledger.schemas.deals import IdRequest
from crm_ledger.schemas.payments import (
    PaymentCreateRequest,
    PaymentHistoryResponse,
    PaymentResponse,
    PaymentUpdateRequest,
)
from crm_ledger.services.ledger_query_service import LedgerQueryService
from crm_ledger.services.payment_service import PaymentLedgerService

router = APIRouter(prefix="/{companyId}/deals/payments", tags=["payments"])


@router.get("")
def payment_history(
    deal_id: int = Query(alias="dealId", ge=1),
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_db_session),
) -> dict:
    history = LedgerQueryService(db).get_payment_history(company_id, deal_id)
    return envelope(PaymentHistoryResponse.from_history(history))


@router.post("", status_code=201)
def record_payment(
    payload: PaymentCreateRequest,
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_db_session),
) -> JSONResponse:
    payment = PaymentLedgerService(db).record_payment(
        company_id,
        deal_id=payload.deal_id,
        amount=payload.amount,
        payment_date=payload.payment_date,
        payment_type=payload.payment_type,
        remarks=payload.remarks,
        created_by_id=payload.created_by_id,
    )
    return JSONResponse(
        status_code=201,
        content=envelope(PaymentResponse.model_validate(payment), message="Payment added successfully"),
    )


@router.put("")
def update_payment(
    payload: PaymentUpdateRequest,
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_db_session),
) -> dict:
    payment = PaymentLedgerService(db).update_payment(
        company_id,
        payload.id,
        amount=payload.amount,
        payment_date=payload.payment_date,
        payment_type=payload.payment_type,
        remarks=payload.remarks,
        created_by_id=payload.created_by_id,
    )
    return envelope(PaymentResponse.model_validate(payment), message="Payment updated successfully")


@router.delete("")
def delete_payment(
    payload: IdRequest,
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_db_session),
) -> dict:
    PaymentLedgerService(db).delete_payment(company_id, payload.id)
    return envelope(message="Payment deleted successfully")
