"""Canonical enum values for the ledger schema."""

from __future__ import annotations

import enum


class PaymentType(str, enum.Enum):
    CASH = "Cash"
    BANK_TRANSFER = "Bank Transfer"
    CHEQUE = "Cheque"
    ONLINE_PAYMENT = "Online Payment"
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    CARD = "Credit/Debit Card"
    UPI = "UPI"
    ADVANCE = "Advance"


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class DealSortField(str, enum.Enum):
    """Sort keys accepted by the deal listing, named as the API exposes them."""

    DEAL_ID = "dealID"
    CREATED_AT = "createdAt"
    DEAL_VALUE = "dealValue"
    DEAL_APPROVAL_VALUE = "dealApprovalValue"
    ADVANCE_PAYMENT = "advancePayment"
    BALANCE_AMOUNT = "balanceAmount"
    REQUIREMENT = "requirement"
    CUSTOMER_NAME = "customerName"


class CustomerSortField(str, enum.Enum):
    CREATED_AT = "createdAt"
    CUSTOMER_NAME = "customerName"
    EMAIL = "email"
