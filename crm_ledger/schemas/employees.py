"""Employee schemas."""

from __future__ import annotations

from pydantic import Field

from crm_ledger.schemas.common import CamelModel, UtcDatetime


class EmployeeCreateRequest(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=320)


class EmployeeResponse(CamelModel):
    id: int
    name: str
    email: str
    is_active: bool = True
    created_at: UtcDatetime | None = None
