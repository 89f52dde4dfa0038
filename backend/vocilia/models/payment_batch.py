"""PaymentBatch model - one weekly reward payout run."""

from enum import Enum

from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String, Text, func

from vocilia.core.database import Base
from vocilia.models.shared import UUIDType, generate_uuid


class PaymentBatchStatus(str, Enum):
    """Payment batch status enum."""

    PENDING = "pending"
    PROCESSING = "processing"
    SETTLING = "settling"  # run finished, some payouts still in flight at Swish
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentBatch(Base):
    """Payment batch model - aggregates one ISO week of customer payouts."""

    __tablename__ = "payment_batches"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    batch_week = Column(String(8), nullable=False, unique=True, index=True)  # e.g. "2025-W09"
    week_start = Column(Date, nullable=False)
    week_end = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=PaymentBatchStatus.PENDING.value)

    # Totals
    total_customers = Column(Integer, nullable=False, default=0)
    total_amount_sek = Column(Numeric(12, 2), nullable=False, default=0)
    successful_payments = Column(Integer, nullable=False, default=0)
    failed_payments = Column(Integer, nullable=False, default=0)

    error_message = Column(Text, nullable=True)

    # Timestamps
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
