"""Employee routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from crm_ledger.core.dependencies import get_company_id, get_db_session
from crm_ledger.schemas.common import envelope
from crm_ledger.schemas.employees import EmployeeCreateRequest, EmployeeResponse
from crm_ledger.services.employee_service import EmployeeService

router = APIRouter(prefix="/{companyId}/employees", tags=["employees"])


@router.get("")
def list_employees(
    company_id: int = Depends(get_company_id),
    page: int = Query(default=1),
    rows_per_page: int | None = Query(default=None, alias="rowsPerPage"),
    search: str | None = Query(default=None, max_length=255),
    db: Session = Depends(get_db_session),
) -> dict:
    result = EmployeeService(db).list_employees(company_id, page=page, page_size=rows_per_page, search=search)
    return envelope([EmployeeResponse.model_validate(row) for row in result.items], page=result)


@router.post("", status_code=201)
def create_employee(
    payload: EmployeeCreateRequest,
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_db_session),
) -> JSONResponse:
    employee = EmployeeService(db).create_employee(company_id, payload.name, payload.email)
    return JSONResponse(
        status_code=201,
        content=envelope(EmployeeResponse.model_validate(employee), message="Employee created successfully"),
    )
