"""RewardCalculation model - the cashback earned by one piece of feedback."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    func,
)

from vocilia.core.database import Base
from vocilia.models.shared import UUIDType, generate_uuid


class RewardCalculation(Base):
    """Reward for a single feedback call.

    A reward is pending until the business verifies it and a weekly batch pays
    it. ``claimed_batch_id`` reserves it for a batch before any payout call;
    ``payment_transaction_id`` marks it consumed.
    """

    __tablename__ = "reward_calculations"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    feedback_id = Column(UUIDType, nullable=False, unique=True, index=True)
    store_id = Column(UUIDType, nullable=False, index=True)
    business_id = Column(UUIDType, nullable=False, index=True)
    customer_phone = Column(String(20), nullable=False, index=True)

    # Scoring inputs
    transaction_amount_sek = Column(Numeric(12, 2), nullable=False)
    rating = Column(Integer, nullable=False)
    has_detailed_feedback = Column(Boolean, nullable=False, default=False)
    sentiment_score = Column(Numeric(4, 3), nullable=False, default=0)

    # Result
    reward_percentage = Column(Numeric(5, 2), nullable=False)
    reward_amount_sek = Column(Numeric(12, 2), nullable=False)

    verified_by_business = Column(Boolean, nullable=False, default=False)
    verified_at = Column(DateTime(timezone=True), nullable=True)

    claimed_batch_id = Column(
        UUIDType, ForeignKey("payment_batches.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    payment_transaction_id = Column(
        UUIDType,
        ForeignKey("payment_transactions.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
