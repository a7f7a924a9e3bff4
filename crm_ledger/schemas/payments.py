"""Payment ledger request/response schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from crm_ledger.models import PaymentType
from crm_ledger.schemas.common import CamelModel, Money, UtcDatetime


class PaymentCreateRequest(CamelModel):
    deal_id: int | None = Field(default=None, ge=1)
    amount: Decimal = Field(gt=0)
    payment_date: datetime
    payment_type: PaymentType
    remarks: str | None = Field(default=None, max_length=2000)
    created_by_id: int | None = Field(default=None, ge=1)


class PaymentUpdateRequest(CamelModel):
    id: int = Field(ge=1)
    amount: Decimal = Field(gt=0)
    payment_date: datetime
    payment_type: PaymentType
    remarks: str | None = Field(default=None, max_length=2000)
    created_by_id: int | None = Field(default=None, ge=1)


class PaymentCreator(CamelModel):
    id: int
    name: str
    email: str


class PaymentResponse(CamelModel):
    id: int
    deal_id: int
    amount: Money
    payment_date: UtcDatetime
    payment_type: PaymentType
    remarks: str = ""
    created_by_id: int | None = None
    created_by: PaymentCreator | None = None
    created_at: UtcDatetime | None = None


class PaymentHistoryEntryResponse(PaymentResponse):
    balance_after: Money


class PaymentHistoryResponse(CamelModel):
    deal_id: int
    deal_code: str = Field(alias="dealID")
    deal_approval_value: Money
    total_paid: Money
    balance_amount: Money
    payments: list[PaymentHistoryEntryResponse]

    @classmethod
    def from_history(cls, history) -> "PaymentHistoryResponse":
        return cls(
            deal_id=history.deal.id,
            deal_code=history.deal.deal_code,
            deal_approval_value=history.deal.deal_approval_value,
            total_paid=history.total_paid,
            balance_amount=history.balance_amount,
            payments=[
                PaymentHistoryEntryResponse(
                    **PaymentResponse.model_validate(entry.payment).model_dump(),
                    balance_after=entry.balance_after,
                )
                for entry in history.entries
            ],
        )
