"""Customer request/response schemas."""

from __future__ import annotations

from pydantic import Field

from crm_ledger.schemas.common import CamelModel, Money, UtcDatetime


class CustomerCreateRequest(CamelModel):
    customer_name: str = Field(min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=320)
    mobile_number: str | None = Field(default=None, max_length=32)
    address: str | None = Field(default=None, max_length=2000)
    gst_number: str | None = Field(default=None, max_length=32)


class CustomerResponse(CamelModel):
    id: int
    company_id: int
    customer_name: str
    email: str | None = None
    mobile_number: str | None = None
    address: str | None = None
    gst_number: str | None = None
    created_at: UtcDatetime | None = None


class CustomerDealTotalsResponse(CustomerResponse):
    total_deal_value: Money
    total_balance_amount: Money
    deal_count: int
