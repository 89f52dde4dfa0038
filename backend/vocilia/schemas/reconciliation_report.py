"""Reconciliation report schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ReconciliationReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    batch_id: UUID
    report_period: str
    total_rewards_paid_sek: Decimal
    admin_fees_collected_sek: Decimal
    payment_success_count: int
    payment_failure_count: int
    discrepancy_count: int
    discrepancy_amount_sek: Decimal
    store_breakdown: list[dict[str, Any]]
    discrepancies: list[dict[str, Any]]
    created_at: datetime
