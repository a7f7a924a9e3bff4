from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from decimal import Decimal
import re

import pytest
from sqlalchemy import func, select

from crm_ledger.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from crm_ledger.models import Deal, Payment, PaymentType
from crm_ledger.services.deal_service import DealService
from crm_ledger.services.payment_service import PaymentLedgerService

DEAL_CODE = re.compile(r"^ACME\d{4}\d{3}$")
PAID_ON = datetime(2026, 10, 1, tzinfo=timezone.utc)


def _payments(session, deal_id):
    return list(session.execute(select(Payment).where(Payment.deal_id == deal_id).order_by(Payment.id)).scalars())


def test_create_deal_with_advance_records_one_advance_payment(db_session, seed):
    service = DealService(db=db_session)

    deal = service.create_deal(
        seed.company_id,
        seed.customer_id,
        requirement="Two rack servers",
        deal_value=10000,
        deal_approval_value=9000,
        advance_payment=500,
    )

    assert DEAL_CODE.match(deal.deal_code)
    assert deal.balance_amount == Decimal("8500.00")
    payments = _payments(db_session, deal.id)
    assert len(payments) == 1
    assert payments[0].payment_type == PaymentType.ADVANCE
    assert payments[0].amount == Decimal("500.00")


def test_create_deal_without_advance_has_no_payments(db_session, seed):
    deal = DealService(db=db_session).create_deal(seed.company_id, seed.customer_id, deal_value=100, deal_approval_value=80)

    assert deal.balance_amount == Decimal("80.00")
    assert _payments(db_session, deal.id) == []


def test_create_deal_ignores_supplied_balance(db_session, seed):
    deal = DealService(db=db_session).create_deal(
        seed.company_id,
        seed.customer_id,
        deal_value=1000,
        deal_approval_value=1000,
        advance_payment=100,
        balance_amount=1000,
    )

    assert deal.balance_amount == Decimal("900.00")


def test_sequential_deals_for_one_customer_get_consecutive_ids(db_session, seed):
    service = DealService(db=db_session)
    first = service.create_deal(seed.company_id, seed.customer_id, deal_value=10, deal_approval_value=10)
    second = service.create_deal(seed.company_id, seed.customer_id, deal_value=10, deal_approval_value=10)

    assert first.deal_code[:-3] == second.deal_code[:-3]
    assert int(second.deal_code[-3:]) == int(first.deal_code[-3:]) + 1


@pytest.mark.parametrize(
    "values",
    [
        {"deal_value": 100, "deal_approval_value": 150},
        {"deal_value": 100, "deal_approval_value": 50, "advance_payment": 60},
        {"deal_value": -1, "deal_approval_value": 0},
        {"deal_value": "abc", "deal_approval_value": 0},
    ],
)
def test_create_deal_rejects_invalid_amounts(db_session, seed, values):
    with pytest.raises(ValidationError):
        DealService(db=db_session).create_deal(seed.company_id, seed.customer_id, **values)

    assert db_session.execute(select(func.count(Deal.id))).scalar_one() == 0


def test_create_deal_requires_customer(db_session, seed):
    service = DealService(db=db_session)
    with pytest.raises(ValidationError, match="Customer ID is required"):
        service.create_deal(seed.company_id, None, deal_value=1, deal_approval_value=1)
    with pytest.raises(NotFoundError):
        service.create_deal(seed.company_id, 9999, deal_value=1, deal_approval_value=1)


def test_create_deal_for_another_companys_customer_is_forbidden(db_session, seed):
    with pytest.raises(ForbiddenError):
        DealService(db=db_session).create_deal(
            seed.company_id, seed.foreign_customer_id, deal_value=1, deal_approval_value=1
        )


def test_update_deal_resizes_advance_and_recomputes_balance(db_session, seed):
    service = DealService(db=db_session)
    deal = service.create_deal(
        seed.company_id, seed.customer_id, deal_value=10000, deal_approval_value=9000, advance_payment=2000
    )
    PaymentLedgerService(db=db_session).record_payment(
        seed.company_id, deal.id, amount=1000, payment_date=PAID_ON, payment_type=PaymentType.CASH
    )

    updated = service.update_deal(seed.company_id, deal.id, advance_payment=1500, requirement="Revised scope")

    assert updated.advance_payment == Decimal("1500.00")
    assert updated.requirement == "Revised scope"
    assert updated.balance_amount == Decimal("6500.00")
    advance = [p for p in _payments(db_session, deal.id) if p.payment_type == PaymentType.ADVANCE]
    assert [p.amount for p in advance] == [Decimal("1500.00")]


def test_update_deal_can_add_and_remove_advance(db_session, seed):
    service = DealService(db=db_session)
    deal = service.create_deal(seed.company_id, seed.customer_id, deal_value=500, deal_approval_value=500)

    with_advance = service.update_deal(seed.company_id, deal.id, advance_payment=200)
    assert with_advance.balance_amount == Decimal("300.00")
    assert len(_payments(db_session, deal.id)) == 1

    without_advance = service.update_deal(seed.company_id, deal.id, advance_payment=0)
    assert without_advance.balance_amount == Decimal("500.00")
    assert _payments(db_session, deal.id) == []


def test_update_deal_advance_matches_ledger_with_several_advance_entries(db_session, seed):
    service = DealService(db=db_session)
    deal = service.create_deal(
        seed.company_id, seed.customer_id, deal_value=10000, deal_approval_value=9000, advance_payment=2000
    )
    PaymentLedgerService(db=db_session).record_payment(
        seed.company_id, deal.id, amount=1000, payment_date=PAID_ON, payment_type=PaymentType.ADVANCE
    )

    updated = service.update_deal(seed.company_id, deal.id, advance_payment=2500)

    advance = [p.amount for p in _payments(db_session, deal.id) if p.payment_type == PaymentType.ADVANCE]
    assert advance == [Decimal("1500.00"), Decimal("1000.00")]
    assert updated.advance_payment == sum(advance) == Decimal("2500.00")
    assert updated.balance_amount == Decimal("6500.00")


def test_update_deal_advance_below_later_advance_entries_is_rejected(db_session, seed):
    service = DealService(db=db_session)
    deal = service.create_deal(
        seed.company_id, seed.customer_id, deal_value=10000, deal_approval_value=9000, advance_payment=2000
    )
    PaymentLedgerService(db=db_session).record_payment(
        seed.company_id, deal.id, amount=1000, payment_date=PAID_ON, payment_type=PaymentType.ADVANCE
    )

    with pytest.raises(ValidationError, match="advancePayment"):
        service.update_deal(seed.company_id, deal.id, advance_payment=500)

    db_session.expire_all()
    stored = db_session.get(Deal, deal.id)
    assert stored.advance_payment == Decimal("3000.00")
    assert stored.balance_amount == Decimal("6000.00")


def test_update_deal_rejects_approval_below_amount_paid(db_session, seed):
    service = DealService(db=db_session)
    deal = service.create_deal(
        seed.company_id, seed.customer_id, deal_value=1000, deal_approval_value=1000, advance_payment=100
    )
    PaymentLedgerService(db=db_session).record_payment(
        seed.company_id, deal.id, amount=700, payment_date=PAID_ON, payment_type=PaymentType.UPI
    )

    with pytest.raises(ValidationError):
        service.update_deal(seed.company_id, deal.id, deal_approval_value=600)

    db_session.expire_all()
    stored = db_session.get(Deal, deal.id)
    assert stored.deal_approval_value == Decimal("1000.00")
    assert stored.balance_amount == Decimal("200.00")


def test_update_deal_rejects_approval_above_value(db_session, seed):
    service = DealService(db=db_session)
    deal = service.create_deal(seed.company_id, seed.customer_id, deal_value=1000, deal_approval_value=900)

    with pytest.raises(ValidationError):
        service.update_deal(seed.company_id, deal.id, deal_approval_value=1200)


def test_update_deal_from_other_company_is_forbidden(db_session, seed):
    service = DealService(db=db_session)
    deal = service.create_deal(seed.company_id, seed.customer_id, deal_value=10, deal_approval_value=10)

    with pytest.raises(ForbiddenError):
        service.update_deal(seed.other_company_id, deal.id, requirement="hijack")
    with pytest.raises(NotFoundError):
        service.update_deal(seed.company_id, 9999, requirement="missing")


def test_delete_deal_removes_its_payments(db_session, seed):
    service = DealService(db=db_session)
    deal = service.create_deal(
        seed.company_id, seed.customer_id, deal_value=1000, deal_approval_value=1000, advance_payment=100
    )
    PaymentLedgerService(db=db_session).record_payment(
        seed.company_id, deal.id, amount=250, payment_date=PAID_ON, payment_type=PaymentType.CHEQUE
    )

    service.delete_deal(seed.company_id, deal.id)

    assert db_session.get(Deal, deal.id) is None
    assert db_session.execute(select(func.count(Payment.id))).scalar_one() == 0


def test_concurrent_creates_get_distinct_deal_ids(session_factory, seed):
    def _create(_):
        session = session_factory()
        try:
            deal = DealService(db=session).create_deal(
                seed.company_id, seed.customer_id, deal_value=100, deal_approval_value=100
            )
            return deal.deal_code
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=5) as pool:
        codes = list(pool.map(_create, range(10)))

    assert len(set(codes)) == 10
    assert sorted(int(code[-3:]) for code in codes) == list(range(1, 11))
