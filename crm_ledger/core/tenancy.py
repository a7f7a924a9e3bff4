"""Company (tenant) ownership enforcement."""

from __future__ import annotations

from crm_ledger.core.exceptions import ForbiddenError


def enforce_company_match(entity_company_id: int, company_id: int, entity_name: str = "Resource") -> None:
    """Ensure entity access stays inside the calling company."""
    if int(entity_company_id) != int(company_id):
        raise ForbiddenError(f"{entity_name} does not belong to this company")
