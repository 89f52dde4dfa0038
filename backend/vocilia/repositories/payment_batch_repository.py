"""Payment batch repository for data access."""

from datetime import UTC, date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vocilia.core.sorting import apply_order_by
from vocilia.models.payment_batch import PaymentBatch, PaymentBatchStatus

SORTABLE_FIELDS = frozenset({"batch_week", "created_at", "completed_at", "total_amount_sek"})

# A batch may only be (re)started from these states
CLAIMABLE_STATUSES = (PaymentBatchStatus.PENDING.value, PaymentBatchStatus.FAILED.value)


class PaymentBatchRepository:
    """Repository for PaymentBatch model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        status: PaymentBatchStatus | None = None,
        order_by: str | None = None,
    ) -> list[PaymentBatch]:
        query = self.db.query(PaymentBatch)
        if status:
            query = query.filter(PaymentBatch.status == status.value)
        query = apply_order_by(query, PaymentBatch, order_by, SORTABLE_FIELDS)
        return query.offset(skip).limit(limit).all()

    def get_by_id(self, batch_id: UUID) -> PaymentBatch | None:
        return self.db.query(PaymentBatch).filter(PaymentBatch.id == batch_id).first()

    def get_by_week(self, batch_week: str) -> PaymentBatch | None:
        return self.db.query(PaymentBatch).filter(PaymentBatch.batch_week == batch_week).first()

    def get_or_create(self, batch_week: str, week_start: date, week_end: date) -> PaymentBatch:
        """Return the batch for ``batch_week``, creating it if it does not exist yet."""
        existing = self.get_by_week(batch_week)
        if existing:
            return existing

        batch = PaymentBatch(
            batch_week=batch_week,
            week_start=week_start,
            week_end=week_end,
            status=PaymentBatchStatus.PENDING.value,
        )
        self.db.add(batch)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost the race against a concurrent run for the same week
            self.db.rollback()
            winner = self.get_by_week(batch_week)
            if winner is None:
                raise
            return winner
        self.db.refresh(batch)
        return batch

    def claim_for_processing(self, batch_id: UUID) -> bool:
        """Atomically move a pending/failed batch to processing.

        Returns False when another run already holds or has finished the batch.
        """
        claimed = (
            self.db.query(PaymentBatch)
            .filter(
                PaymentBatch.id == batch_id,
                PaymentBatch.status.in_(CLAIMABLE_STATUSES),
            )
            .update(
                {
                    PaymentBatch.status: PaymentBatchStatus.PROCESSING.value,
                    PaymentBatch.started_at: datetime.now(UTC),
                    PaymentBatch.error_message: None,
                },
                synchronize_session=False,
            )
        )
        self.db.commit()
        return claimed == 1

    def finish(
        self,
        batch_id: UUID,
        status: PaymentBatchStatus,
        total_customers: int,
        total_amount_sek: Decimal,
        successful_payments: int,
        failed_payments: int,
    ) -> PaymentBatch | None:
        """Write totals and status for a batch.

        ``completed_at`` is stamped the first time the batch reaches a final
        status and kept on later refreshes.
        """
        batch = self.get_by_id(batch_id)
        if not batch:
            return None

        batch.status = status.value  # type: ignore[assignment]
        batch.total_customers = total_customers  # type: ignore[assignment]
        batch.total_amount_sek = total_amount_sek  # type: ignore[assignment]
        batch.successful_payments = successful_payments  # type: ignore[assignment]
        batch.failed_payments = failed_payments  # type: ignore[assignment]
        if status != PaymentBatchStatus.SETTLING and batch.completed_at is None:
            batch.completed_at = datetime.now(UTC)  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(batch)
        return batch

    def mark_failed(self, batch_id: UUID, error_message: str) -> PaymentBatch | None:
        batch = self.get_by_id(batch_id)
        if not batch:
            return None

        batch.status = PaymentBatchStatus.FAILED.value  # type: ignore[assignment]
        batch.error_message = error_message[:2000]  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(batch)
        return batch

