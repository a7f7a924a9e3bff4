"""
Payment ledger for deals.

Every change to a deal's outstanding balance after creation happens here, as a
relative update applied in the same transaction as the payment row:

    record  -> balance = balance - amount        (only WHERE balance >= amount)
    update  -> balance = balance - (new - old)   (guarded the same way when it grows)
    delete  -> balance = balance + amount

The guard lives in the UPDATE's WHERE clause, so two concurrent payments can
never both pass an overpayment check against the same stale balance.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.orm import selectinload

from crm_ledger.core.exceptions import NotFoundError, ValidationError
from crm_ledger.core.tenancy import enforce_company_match
from crm_ledger.models import Deal, Employee, Payment, PaymentType
from crm_ledger.models.base import utcnow
from crm_ledger.services.base_service import BaseService
from crm_ledger.utils.validators import sanitize_text, to_money

logger = logging.getLogger(__name__)


def _to_datetime(value: datetime | date | str | None) -> datetime:
    if value is None or value == "":
        raise ValidationError("paymentDate is required.")
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValidationError("paymentDate must be an ISO-8601 date.") from exc
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _to_payment_type(value: PaymentType | str | None) -> PaymentType:
    if value is None or value == "":
        raise ValidationError("paymentType is required.")
    try:
        return PaymentType(value)
    except ValueError as exc:
        raise ValidationError(f"Unsupported paymentType: {value}") from exc


def _positive_amount(value: Decimal | int | str | None) -> Decimal:
    amount = to_money(value, "amount")
    if amount <= 0:
        raise ValidationError("Amount must be greater than 0.")
    return amount


class PaymentLedgerService(BaseService):
    """Record, correct and remove payments while keeping deal balances consistent."""

    def list_payments(self, company_id: int, deal_id: int) -> list[Payment]:
        self._get_deal(company_id, deal_id)
        return list(
            self.db.execute(
                select(Payment)
                .options(selectinload(Payment.created_by))
                .where(Payment.deal_id == deal_id)
                .order_by(Payment.payment_date.desc(), Payment.id.desc())
            ).scalars()
        )

    def get_payment(self, company_id: int, payment_id: int, for_update: bool = False) -> Payment:
        stmt = select(Payment).options(selectinload(Payment.deal)).where(Payment.id == payment_id)
        if for_update:
            stmt = stmt.with_for_update(of=Payment).execution_options(populate_existing=True)
        payment = self.db.execute(stmt).scalar_one_or_none()
        if payment is None:
            raise NotFoundError("Payment not found")
        enforce_company_match(payment.deal.company_id, company_id, "Payment")
        return payment

    def record_payment(
        self,
        company_id: int,
        deal_id: int | None,
        amount: Decimal | int | str,
        payment_date: datetime | date | str | None,
        payment_type: PaymentType | str | None,
        remarks: str | None = None,
        created_by_id: int | None = None,
    ) -> Payment:
        if not deal_id:
            raise ValidationError("Deal ID is required")
        deal = self._get_deal(company_id, deal_id)
        value = _positive_amount(amount)
        paid_on = _to_datetime(payment_date)
        kind = _to_payment_type(payment_type)
        employee = self._resolve_employee(company_id, created_by_id)

        payment = Payment(
            deal_id=deal.id,
            amount=value,
            payment_date=paid_on,
            payment_type=kind,
            remarks=sanitize_text(remarks),
            created_by_id=employee.id if employee else None,
        )
        self.db.add(payment)
        self.db.flush()
        self._apply_to_balance(deal.id, value)
        if kind is PaymentType.ADVANCE:
            self.refresh_advance_total(deal.id)
        self.commit()
        self.db.refresh(payment)
        logger.info(
            "payment.recorded",
            extra={
                "event": "payment.recorded",
                "company_id": company_id,
                "deal_id": deal.id,
                "payment_id": payment.id,
                "amount": str(value),
            },
        )
        return payment

    def update_payment(
        self,
        company_id: int,
        payment_id: int,
        amount: Decimal | int | str,
        payment_date: datetime | date | str | None,
        payment_type: PaymentType | str | None,
        remarks: str | None = None,
        created_by_id: int | None = None,
    ) -> Payment:
        payment = self.get_payment(company_id, payment_id, for_update=True)
        value = _positive_amount(amount)
        paid_on = _to_datetime(payment_date)
        kind = _to_payment_type(payment_type)
        employee = self._resolve_employee(company_id, created_by_id)

        touches_advance = PaymentType.ADVANCE in (payment.payment_type, kind)
        delta = value - payment.amount
        payment.amount = value
        payment.payment_date = paid_on
        payment.payment_type = kind
        payment.remarks = sanitize_text(remarks)
        payment.created_by_id = employee.id if employee else None
        self.db.flush()

        if delta:
            self._apply_to_balance(payment.deal_id, delta)
        if touches_advance:
            self.refresh_advance_total(payment.deal_id)
        self.commit()
        self.db.refresh(payment)
        logger.info(
            "payment.updated",
            extra={
                "event": "payment.updated",
                "company_id": company_id,
                "deal_id": payment.deal_id,
                "payment_id": payment.id,
                "delta": str(delta),
            },
        )
        return payment

    def delete_payment(self, company_id: int, payment_id: int) -> None:
        payment = self.get_payment(company_id, payment_id, for_update=True)
        deal_id = payment.deal_id
        amount = payment.amount
        was_advance = payment.payment_type is PaymentType.ADVANCE

        self.db.delete(payment)
        self.db.flush()
        self._apply_to_balance(deal_id, -amount)
        if was_advance:
            self.refresh_advance_total(deal_id)
        self.commit()
        logger.info(
            "payment.deleted",
            extra={
                "event": "payment.deleted",
                "company_id": company_id,
                "deal_id": deal_id,
                "payment_id": payment_id,
                "amount": str(amount),
            },
        )

    def _get_deal(self, company_id: int, deal_id: int) -> Deal:
        deal = self.db.get(Deal, deal_id)
        if deal is None:
            raise NotFoundError("Deal not found")
        enforce_company_match(deal.company_id, company_id, "Deal")
        return deal

    def _resolve_employee(self, company_id: int, employee_id: int | None) -> Employee | None:
        if employee_id is None:
            return None
        employee = self.db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee not found")
        enforce_company_match(employee.company_id, company_id, "Employee")
        return employee

    def _apply_to_balance(self, deal_id: int, paid_delta: Decimal) -> None:
        """Move the balance by ``-paid_delta``; refuse to take it below zero."""
        stmt = update(Deal).where(Deal.id == deal_id)
        if paid_delta > 0:
            stmt = stmt.where(Deal.balance_amount >= paid_delta)
        result = self.db.execute(
            stmt.values(balance_amount=Deal.balance_amount - paid_delta, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.rollback()
            logger.warning(
                "payment.overpayment_rejected",
                extra={"event": "payment.overpayment_rejected", "deal_id": deal_id, "amount": str(paid_delta)},
            )
            raise ValidationError("Amount cannot exceed the outstanding balance.")

    def refresh_advance_total(self, deal_id: int) -> None:
        """Set the deal's advance figure to the sum of its Advance entries."""
        advance_total = (
            select(func.coalesce(func.sum(Payment.amount), 0))
            .where(Payment.deal_id == deal_id, Payment.payment_type == PaymentType.ADVANCE)
            .scalar_subquery()
        )
        self.db.execute(
            update(Deal)
            .where(Deal.id == deal_id)
            .values(advance_payment=advance_total)
            .execution_options(synchronize_session=False)
        )
