"""Deal record management: create, update and delete deals with their ledger."""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import func, select, update

from crm_ledger.core.exceptions import NotFoundError, ValidationError
from crm_ledger.core.tenancy import enforce_company_match
from crm_ledger.models import Customer, Deal, Payment, PaymentType
from crm_ledger.models.base import utcnow
from crm_ledger.services.base_service import BaseService
from crm_ledger.services.deal_id_generator import DealIdGenerator
from crm_ledger.services.payment_service import PaymentLedgerService
from crm_ledger.utils.validators import sanitize_text, to_money

logger = logging.getLogger(__name__)


def validate_deal_amounts(deal_value: Decimal, deal_approval_value: Decimal, advance_payment: Decimal) -> None:
    if deal_value < 0 or deal_approval_value < 0 or advance_payment < 0:
        raise ValidationError("Deal amounts cannot be negative.")
    if deal_approval_value > deal_value:
        raise ValidationError("dealApprovalValue cannot exceed dealValue.")
    if advance_payment > deal_approval_value:
        raise ValidationError("advancePayment cannot exceed dealApprovalValue.")


class DealService(BaseService):
    """Service for deal CRUD; payments after creation go through PaymentLedgerService."""

    def get_deal(self, company_id: int, deal_id: int, for_update: bool = False) -> Deal:
        stmt = select(Deal).where(Deal.id == deal_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        deal = self.db.execute(stmt).scalar_one_or_none()
        if deal is None:
            raise NotFoundError("Deal not found")
        enforce_company_match(deal.company_id, company_id, "Deal")
        return deal

    def create_deal(
        self,
        company_id: int,
        customer_id: int | None,
        requirement: str | None = None,
        deal_value: Decimal | int | str = 0,
        deal_approval_value: Decimal | int | str = 0,
        advance_payment: Decimal | int | str = 0,
        balance_amount: Decimal | int | str | None = None,
    ) -> Deal:
        if not customer_id:
            raise ValidationError("Customer ID is required")

        customer = self.db.get(Customer, customer_id)
        if customer is None:
            raise NotFoundError("Customer not found")
        enforce_company_match(customer.company_id, company_id, "Customer")

        value = to_money(deal_value, "dealValue")
        approval = to_money(deal_approval_value, "dealApprovalValue")
        advance = to_money(advance_payment, "advancePayment")
        validate_deal_amounts(value, approval, advance)

        balance = approval - advance
        if balance_amount is not None and to_money(balance_amount, "balanceAmount") != balance:
            logger.warning(
                "deal.create.balance_mismatch",
                extra={
                    "event": "deal.create.balance_mismatch",
                    "company_id": company_id,
                    "customer_id": customer_id,
                    "supplied": str(balance_amount),
                    "computed": str(balance),
                },
            )

        deal = Deal(
            company_id=company_id,
            customer_id=customer.id,
            deal_code=DealIdGenerator(self.db).next_deal_code(customer),
            requirement=sanitize_text(requirement),
            deal_value=value,
            deal_approval_value=approval,
            advance_payment=advance,
            balance_amount=balance,
        )
        if advance > 0:
            deal.payments.append(
                Payment(
                    amount=advance,
                    payment_date=utcnow(),
                    payment_type=PaymentType.ADVANCE,
                    remarks="",
                )
            )
        self.db.add(deal)
        self.commit()
        self.db.refresh(deal)
        logger.info(
            "deal.created",
            extra={
                "event": "deal.created",
                "company_id": company_id,
                "deal_id": deal.id,
                "deal_code": deal.deal_code,
                "advance_payment": str(advance),
            },
        )
        return deal

    def update_deal(
        self,
        company_id: int,
        deal_id: int,
        requirement: str | None = None,
        deal_value: Decimal | int | str | None = None,
        deal_approval_value: Decimal | int | str | None = None,
        advance_payment: Decimal | int | str | None = None,
    ) -> Deal:
        deal = self.get_deal(company_id, deal_id, for_update=True)

        value = deal.deal_value if deal_value is None else to_money(deal_value, "dealValue")
        approval = (
            deal.deal_approval_value
            if deal_approval_value is None
            else to_money(deal_approval_value, "dealApprovalValue")
        )
        advance = deal.advance_payment if advance_payment is None else to_money(advance_payment, "advancePayment")
        validate_deal_amounts(value, approval, advance)

        if requirement is not None:
            deal.requirement = sanitize_text(requirement)
        deal.deal_value = value
        deal.deal_approval_value = approval
        advance_changed = advance != deal.advance_payment
        if advance_changed:
            self._sync_advance_payment(deal, advance)
        self.db.flush()
        if advance_changed:
            PaymentLedgerService(self.db).refresh_advance_total(deal.id)

        paid = self._paid_total(deal.id)
        if paid > approval:
            self.rollback()
            raise ValidationError(
                f"dealApprovalValue cannot be below the {paid} already paid against this deal."
            )

        # Balance always derives from the ledger, never from the advance figure alone.
        paid_so_far = (
            select(func.coalesce(func.sum(Payment.amount), 0))
            .where(Payment.deal_id == deal.id)
            .scalar_subquery()
        )
        self.db.execute(
            update(Deal)
            .where(Deal.id == deal.id)
            .values(balance_amount=Deal.deal_approval_value - paid_so_far)
            .execution_options(synchronize_session=False)
        )
        self.commit()
        self.db.refresh(deal)
        logger.info(
            "deal.updated",
            extra={"event": "deal.updated", "company_id": company_id, "deal_id": deal.id},
        )
        return deal

    def delete_deal(self, company_id: int, deal_id: int) -> None:
        deal = self.get_deal(company_id, deal_id, for_update=True)
        removed = len(deal.payments)
        # Payments go with the deal through the relationship cascade.
        self.db.delete(deal)
        self.commit()
        logger.info(
            "deal.deleted",
            extra={
                "event": "deal.deleted",
                "company_id": company_id,
                "deal_id": deal_id,
                "payments_removed": removed,
            },
        )

    def _paid_total(self, deal_id: int) -> Decimal:
        total = self.db.execute(
            select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.deal_id == deal_id)
        ).scalar_one()
        return to_money(total)

    def _sync_advance_payment(self, deal: Deal, advance: Decimal) -> None:
        """Resize the first Advance entry so all Advance entries add up to ``advance``."""
        entries = list(
            self.db.execute(
                select(Payment)
                .where(Payment.deal_id == deal.id, Payment.payment_type == PaymentType.ADVANCE)
                .order_by(Payment.id)
            ).scalars()
        )
        entry = entries[0] if entries else None
        later = sum((p.amount for p in entries[1:]), Decimal("0.00"))
        target = advance - later
        if target < 0:
            self.rollback()
            raise ValidationError(f"advancePayment cannot be below the {later} recorded in later Advance payments.")

        if target > 0 and entry is not None:
            entry.amount = target
        elif target > 0:
            self.db.add(
                Payment(
                    deal_id=deal.id,
                    amount=target,
                    payment_date=utcnow(),
                    payment_type=PaymentType.ADVANCE,
                    remarks="",
                )
            )
        elif entry is not None:
            self.db.delete(entry)
