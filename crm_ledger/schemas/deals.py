"""Deal request/response schemas for API contracts."""

from __future__ import annotations

from decimal import Decimal

from pydantic import Field

from crm_ledger.schemas.common import CamelModel, Money, UtcDatetime


class DealCreateRequest(CamelModel):
    customer_id: int | None = Field(default=None, ge=1)
    requirement: str | None = Field(default=None, max_length=10000)
    deal_value: Decimal = Field(default=Decimal("0"), ge=0)
    deal_approval_value: Decimal = Field(default=Decimal("0"), ge=0)
    advance_payment: Decimal = Field(default=Decimal("0"), ge=0)
    # Accepted for compatibility; the server computes the balance itself.
    balance_amount: Decimal | None = None


class DealUpdateRequest(CamelModel):
    id: int = Field(ge=1)
    requirement: str | None = Field(default=None, max_length=10000)
    deal_value: Decimal | None = Field(default=None, ge=0)
    deal_approval_value: Decimal | None = Field(default=None, ge=0)
    advance_payment: Decimal | None = Field(default=None, ge=0)


class IdRequest(CamelModel):
    id: int = Field(ge=1)


class DealCustomerSummary(CamelModel):
    id: int
    customer_name: str
    email: str | None = None
    mobile_number: str | None = None


class DealResponse(CamelModel):
    id: int
    deal_code: str = Field(alias="dealID")
    company_id: int
    customer_id: int
    requirement: str | None = None
    deal_value: Money
    deal_approval_value: Money
    advance_payment: Money
    balance_amount: Money
    created_at: UtcDatetime | None = None
    updated_at: UtcDatetime | None = None
    customer: DealCustomerSummary | None = None
