"""SQLAlchemy model package for the tenant-aware ledger schema."""

from crm_ledger.models.ams import AmsContract
from crm_ledger.models.base import Base
from crm_ledger.models.company import Company
from crm_ledger.models.customer import Customer
from crm_ledger.models.deal import Deal
from crm_ledger.models.deal_sequence import DealSequence
from crm_ledger.models.employee import Employee
from crm_ledger.models.enums import CustomerSortField, DealSortField, PaymentType, SortOrder
from crm_ledger.models.payment import Payment

__all__ = [
    "AmsContract",
    "Base",
    "Company",
    "Customer",
    "CustomerSortField",
    "Deal",
    "DealSequence",
    "DealSortField",
    "Employee",
    "Payment",
    "PaymentType",
    "SortOrder",
]
