"""Business invoice schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class BusinessInvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    batch_id: UUID
    business_id: UUID
    invoice_number: str
    total_rewards_sek: Decimal
    admin_fee_sek: Decimal
    total_amount_sek: Decimal
    status: str
    due_date: datetime
    paid_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
