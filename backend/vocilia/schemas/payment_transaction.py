"""Payment transaction and failure schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class PaymentTransactionResponse(BaseModel):
    """Schema for payment transaction response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    batch_id: UUID
    customer_phone: str
    amount_sek: Decimal
    reward_count: int
    status: str
    swish_payment_reference: str | None = None
    swish_transaction_id: str | None = None
    failure_reason: str | None = None
    retry_count: int
    processed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class PaymentFailureResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    payment_transaction_id: UUID
    failure_reason: str
    swish_error_code: str | None = None
    retry_attempts: int
    resolution_status: str
    resolved_at: datetime | None = None
    created_at: datetime
