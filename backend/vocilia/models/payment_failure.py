"""PaymentFailure model - recorded whenever a payout attempt fails."""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from vocilia.core.database import Base
from vocilia.models.shared import UUIDType, generate_uuid


class FailureResolutionStatus(str, Enum):
    PENDING = "pending"
    RETRYING = "retrying"
    RESOLVED = "resolved"
    MANUAL_REVIEW = "manual_review"


class PaymentFailure(Base):
    __tablename__ = "payment_failures"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    payment_transaction_id = Column(
        UUIDType,
        ForeignKey("payment_transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    failure_reason = Column(Text, nullable=False)
    swish_error_code = Column(String(50), nullable=True)
    retry_attempts = Column(Integer, nullable=False, default=0)
    resolution_status = Column(
        String(20), nullable=False, default=FailureResolutionStatus.PENDING.value
    )
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
