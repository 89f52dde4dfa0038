"""Payment batch schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

BATCH_WEEK_PATTERN = r"^\d{4}-W(0[1-9]|[1-4]\d|5[0-3])$"


class PaymentBatchProcessRequest(BaseModel):
    """Schema for triggering a batch run. Defaults to the previous ISO week."""

    batch_week: str | None = Field(default=None, pattern=BATCH_WEEK_PATTERN)


class PaymentBatchResponse(BaseModel):
    """Schema for payment batch response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    batch_week: str
    week_start: date
    week_end: date
    status: str
    total_customers: int
    total_amount_sek: Decimal
    successful_payments: int
    failed_payments: int
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class PaymentBatchEnqueueResponse(BaseModel):
    job_id: str
    batch_week: str
