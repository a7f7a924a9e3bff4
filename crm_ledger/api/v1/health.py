"""Health endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter

from crm_ledger.core.config import get_config
from crm_ledger.schemas.common import envelope

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict:
    cfg = get_config()
    return envelope({"status": "ok", "service": cfg.APP_NAME, "version": cfg.APP_VERSION})
