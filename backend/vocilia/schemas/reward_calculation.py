"""Reward calculation schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class RewardCalculationCreate(BaseModel):
    """Scored feedback submitted for reward calculation."""

    feedback_id: UUID
    store_id: UUID
    business_id: UUID
    customer_phone: str = Field(..., min_length=10, max_length=20)
    transaction_amount_sek: Decimal = Field(..., gt=0)
    rating: int = Field(..., ge=1, le=5)
    has_detailed_feedback: bool = False
    sentiment_score: Decimal = Field(default=Decimal("0"), ge=-1, le=1)


class RewardVerifyRequest(BaseModel):
    reward_ids: list[UUID] = Field(..., min_length=1)


class RewardVerifyResponse(BaseModel):
    verified_count: int


class RewardCalculationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    feedback_id: UUID
    store_id: UUID
    business_id: UUID
    customer_phone: str
    transaction_amount_sek: Decimal
    rating: int
    has_detailed_feedback: bool
    sentiment_score: Decimal
    reward_percentage: Decimal
    reward_amount_sek: Decimal
    verified_by_business: bool
    verified_at: datetime | None = None
    claimed_batch_id: UUID | None = None
    payment_transaction_id: UUID | None = None
    created_at: datetime


class CustomerRewardSummary(BaseModel):
    """Pending (verified, unpaid) rewards summed for one customer."""

    customer_phone: str
    total_amount_sek: Decimal
    reward_count: int
