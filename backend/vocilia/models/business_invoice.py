"""BusinessInvoice model - what a business owes for the rewards paid on its behalf."""

from enum import Enum

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    func,
)

from vocilia.core.database import Base
from vocilia.models.shared import UUIDType, generate_uuid


class BusinessInvoiceStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    DISPUTED = "disputed"


class BusinessInvoice(Base):
    __tablename__ = "business_invoices"
    __table_args__ = (
        Index("ix_business_invoices_batch_business", "batch_id", "business_id"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    batch_id = Column(
        UUIDType, ForeignKey("payment_batches.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    business_id = Column(UUIDType, nullable=False, index=True)
    invoice_number = Column(String(32), nullable=False, unique=True)

    total_rewards_sek = Column(Numeric(12, 2), nullable=False)
    admin_fee_sek = Column(Numeric(12, 2), nullable=False)
    total_amount_sek = Column(Numeric(12, 2), nullable=False)

    status = Column(String(20), nullable=False, default=BusinessInvoiceStatus.PENDING.value)
    due_date = Column(DateTime(timezone=True), nullable=False)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
