"""Root API router for v1 endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from crm_ledger.api.v1 import customers, dealcustomer, deals, employees, health, payments
from crm_ledger.core.config import get_config


def get_api_router() -> APIRouter:
    api_router = APIRouter(prefix=get_config().API_PREFIX)
    api_router.include_router(health.router)
    api_router.include_router(payments.router)
    api_router.include_router(deals.router)
    api_router.include_router(dealcustomer.router)
    api_router.include_router(customers.router)
    api_router.include_router(employees.router)
    return api_router
