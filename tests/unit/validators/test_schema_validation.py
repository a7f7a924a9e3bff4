from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from crm_ledger.models import PaymentType
from crm_ledger.schemas.common import envelope
from crm_ledger.schemas.deals import DealCreateRequest, DealResponse
from crm_ledger.schemas.payments import PaymentCreateRequest
from crm_ledger.services.pagination import Page


def test_deal_schema_reads_camel_case_payload():
    payload = DealCreateRequest.model_validate(
        {"customerId": "7", "dealValue": "1200.50", "dealApprovalValue": 1000, "advancePayment": 0}
    )
    assert payload.customer_id == 7
    assert payload.deal_value == Decimal("1200.50")


def test_deal_schema_rejects_negative_amounts():
    with pytest.raises(ValidationError):
        DealCreateRequest.model_validate({"customerId": 1, "dealValue": -10})


def test_payment_schema_parses_type_by_label():
    payload = PaymentCreateRequest.model_validate(
        {"dealId": 3, "amount": 10, "paymentDate": "2026-10-19T09:30:00Z", "paymentType": "Credit/Debit Card"}
    )
    assert payload.payment_type is PaymentType.CARD


def test_payment_schema_requires_positive_amount():
    with pytest.raises(ValidationError):
        PaymentCreateRequest.model_validate(
            {"dealId": 3, "amount": 0, "paymentDate": "2026-10-19T09:30:00Z", "paymentType": "Cash"}
        )


def test_envelope_serialises_money_as_numbers_with_deal_id_alias():
    deal = DealResponse(
        id=1,
        deal_code="ACME1910001",
        company_id=1,
        customer_id=2,
        deal_value=Decimal("100.00"),
        deal_approval_value=Decimal("90.00"),
        advance_payment=Decimal("0.00"),
        balance_amount=Decimal("90.00"),
    )
    body = envelope([deal], page=Page(items=[deal], total=11, page=2, page_size=10))

    assert body["success"] is True
    assert body["total"] == 11
    assert body["totalPages"] == 2
    assert body["data"][0]["dealID"] == "ACME1910001"
    assert body["data"][0]["balanceAmount"] == 90.0
    assert "message" not in body


@pytest.mark.parametrize("missing", ["paymentDate", "paymentType"])
def test_payment_schema_requires_date_and_type(missing):
    body = {"dealId": 3, "amount": 10, "paymentDate": "2026-10-19T09:30:00Z", "paymentType": "Cash"}
    del body[missing]

    with pytest.raises(ValidationError):
        PaymentCreateRequest.model_validate(body)


def test_naive_timestamps_are_sent_as_utc():
    deal = DealResponse(
        id=1,
        deal_code="ACME1910001",
        company_id=1,
        customer_id=2,
        deal_value=Decimal("100.00"),
        deal_approval_value=Decimal("90.00"),
        advance_payment=Decimal("0.00"),
        balance_amount=Decimal("90.00"),
        created_at=datetime(2026, 10, 19, 7, 40, 19),
    )

    created_at = envelope(deal)["data"]["createdAt"]

    assert created_at.endswith(("Z", "+00:00"))
