"""PaymentTransaction model for tracking Swish payouts to customers."""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, func

from vocilia.core.database import Base
from vocilia.models.shared import UUIDType, generate_uuid


class PaymentTransactionStatus(str, Enum):
    """Payment transaction status enum."""

    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESSFUL = "successful"
    FAILED = "failed"


class PaymentTransaction(Base):
    """One payout per customer phone number per batch."""

    __tablename__ = "payment_transactions"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    batch_id = Column(
        UUIDType, ForeignKey("payment_batches.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    customer_phone = Column(String(20), nullable=False, index=True)
    amount_sek = Column(Numeric(12, 2), nullable=False)
    reward_count = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=PaymentTransactionStatus.PENDING.value)

    # Swish info
    swish_payment_reference = Column(String(64), nullable=True, unique=True)
    swish_transaction_id = Column(String(64), nullable=True, index=True)

    failure_reason = Column(Text, nullable=True)
    retry_count = Column(Integer, nullable=False, default=0)

    # Timestamps
    processed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
