"""Common schema module."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any

from fastapi.encoders import jsonable_encoder
from pydantic import AfterValidator, BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from crm_ledger.services.pagination import Page

# Currency stays Decimal in Python and leaves the API as a JSON number.
Money = Annotated[Decimal, PlainSerializer(lambda value: float(value), return_type=float, when_used="json")]


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


# Stored timestamps are UTC; some backends hand them back without an offset.
UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Envelope(CamelModel):
    success: bool = True
    data: Any = None
    message: str | None = None
    error: str | None = None
    total: int | None = None
    page: int | None = None
    total_pages: int | None = None


def envelope(
    data: Any = None,
    *,
    message: str | None = None,
    page: Page | None = None,
    success: bool = True,
    error: str | None = None,
) -> dict[str, Any]:
    """Build the response body; keys without a value are left out."""
    body = Envelope(success=success, message=message, error=error)
    if page is not None:
        body.total = page.total
        body.page = page.page
        body.total_pages = page.total_pages
    payload = body.model_dump(by_alias=True, exclude_none=True)
    if data is not None:
        payload["data"] = jsonable_encoder(data, by_alias=True)
    return payload


def error_envelope(error: str, message: str | None = None) -> dict[str, Any]:
    return envelope(success=False, error=error, message=message or error)
