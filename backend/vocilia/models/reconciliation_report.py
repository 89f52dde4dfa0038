"""ReconciliationReport model - produced after a batch completes."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, Numeric, String, func

from vocilia.core.database import Base
from vocilia.models.shared import UUIDType, generate_uuid


class ReconciliationReport(Base):
    __tablename__ = "reconciliation_reports"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    batch_id = Column(
        UUIDType,
        ForeignKey("payment_batches.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    report_period = Column(String(8), nullable=False)

    total_rewards_paid_sek = Column(Numeric(12, 2), nullable=False, default=0)
    admin_fees_collected_sek = Column(Numeric(12, 2), nullable=False, default=0)
    payment_success_count = Column(Integer, nullable=False, default=0)
    payment_failure_count = Column(Integer, nullable=False, default=0)
    discrepancy_count = Column(Integer, nullable=False, default=0)
    discrepancy_amount_sek = Column(Numeric(12, 2), nullable=False, default=0)

    store_breakdown = Column(JSON, nullable=False, default=list)
    discrepancies = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
