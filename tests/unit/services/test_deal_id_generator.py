from __future__ import annotations

from datetime import date

from crm_ledger.models import Customer, Deal
from crm_ledger.services.deal_id_generator import DealIdGenerator, date_prefix, format_deal_code, name_prefix

ON = date(2026, 10, 19)


def test_name_prefix_keeps_letters_only_and_truncates():
    assert name_prefix("Acme Corp.") == "ACME"
    assert name_prefix("j&j 2 traders") == "JJTR"


def test_name_prefix_short_names_are_not_padded():
    assert name_prefix("Al") == "AL"


def test_name_prefix_without_letters_falls_back():
    assert name_prefix("1234 -- 99") == "CUST"
    assert name_prefix("") == "CUST"


def test_date_prefix_is_day_then_month():
    assert date_prefix(date(2026, 3, 7)) == "0703"
    assert date_prefix(ON) == "1910"


def test_format_deal_code_pads_sequence_to_three_digits():
    assert format_deal_code("ACME1910", 3) == "ACME1910003"
    assert format_deal_code("ACME1910", 1234) == "ACME19101234"


def test_next_deal_code_increments_per_customer(db_session, seed):
    customer = db_session.get(Customer, seed.customer_id)
    other = db_session.get(Customer, seed.foreign_customer_id)
    generator = DealIdGenerator(db_session)

    assert generator.next_deal_code(customer, on_date=ON) == "ACME1910001"
    assert generator.next_deal_code(customer, on_date=ON) == "ACME1910002"
    assert generator.next_deal_code(other, on_date=ON) == "GLOB1910001"
    assert generator.next_deal_code(customer, on_date=date(2026, 10, 20)) == "ACME2010001"
    db_session.rollback()


def test_counter_seeds_from_existing_deals(db_session, seed):
    customer = db_session.get(Customer, seed.customer_id)
    db_session.add(
        Deal(
            company_id=seed.company_id,
            customer_id=customer.id,
            deal_code="ACME1910001",
            deal_value=100,
            deal_approval_value=100,
            advance_payment=0,
            balance_amount=100,
        )
    )
    db_session.commit()

    generator = DealIdGenerator(db_session)
    assert generator.preview_next_deal_code(customer, on_date=ON) == "ACME1910002"
    assert generator.next_deal_code(customer, on_date=ON) == "ACME1910002"


def test_preview_does_not_reserve(db_session, seed):
    customer = db_session.get(Customer, seed.customer_id)
    generator = DealIdGenerator(db_session)

    assert generator.preview_next_deal_code(customer, on_date=ON) == "ACME1910001"
    assert generator.preview_next_deal_code(customer, on_date=ON) == "ACME1910001"
    assert generator.next_deal_code(customer, on_date=ON) == "ACME1910001"


def test_rolled_back_reservation_is_released(db_session, seed):
    customer = db_session.get(Customer, seed.customer_id)
    generator = DealIdGenerator(db_session)

    generator.next_deal_code(customer, on_date=ON)
    db_session.rollback()

    assert generator.next_deal_code(db_session.get(Customer, seed.customer_id), on_date=ON) == "ACME1910001"
