"""Shared error mapping for API v1 route modules."""

from __future__ import annotations

from fastapi.exceptions import RequestValidationError

from crm_ledger.core.exceptions import LedgerException, PersistenceError


def map_domain_error(exc: Exception) -> tuple[int, str]:
    if isinstance(exc, PersistenceError):
        # Driver detail stays in the logs.
        return 500, "Database operation failed."
    if isinstance(exc, LedgerException):
        return exc.status_code, str(exc)
    return 500, "Internal server error."


def describe_validation_error(exc: RequestValidationError) -> str:
    """Collapse pydantic errors into one readable line."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item not in ("body", "query", "path"))
        message = error.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request."
