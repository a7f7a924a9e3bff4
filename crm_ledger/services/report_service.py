"""Tabular deal exports."""

from __future__ import annotations

import logging

import pandas as pd

from crm_ledger.models import DealSortField, SortOrder
from crm_ledger.services.base_service import BaseService
from crm_ledger.services.ledger_query_service import LedgerQueryService
from crm_ledger.utils.orm import rows_to_df

logger = logging.getLogger(__name__)

DEAL_EXPORT_COLUMNS = {
    "deal_code": "Deal ID",
    "customer_name": "Customer",
    "requirement": "Requirement",
    "deal_value": "Deal Value",
    "deal_approval_value": "Approved Value",
    "advance_payment": "Advance Payment",
    "balance_amount": "Balance Amount",
    "created_at": "Created At",
}


class ReportService(BaseService):
    def deals_frame(
        self,
        company_id: int,
        search: str | None = None,
        sort_field: DealSortField = DealSortField.DEAL_ID,
        sort_order: SortOrder = SortOrder.ASC,
    ) -> pd.DataFrame:
        deals = LedgerQueryService(self.db).all_deals(company_id, search, sort_field, sort_order)
        rows = [
            {
                "deal_code": deal.deal_code,
                "customer_name": deal.customer.customer_name,
                "requirement": deal.requirement or "",
                "deal_value": float(deal.deal_value),
                "deal_approval_value": float(deal.deal_approval_value),
                "advance_payment": float(deal.advance_payment),
                "balance_amount": float(deal.balance_amount),
                "created_at": deal.created_at.isoformat() if deal.created_at else "",
            }
            for deal in deals
        ]
        return rows_to_df(rows, DEAL_EXPORT_COLUMNS)

    def export_deals_csv(self, company_id: int, **filters) -> str:
        df = self.deals_frame(company_id, **filters)
        logger.info(
            "report.deals_exported",
            extra={"event": "report.deals_exported", "company_id": company_id, "rows": len(df)},
        )
        return df.to_csv(index=False, float_format="%.2f")
