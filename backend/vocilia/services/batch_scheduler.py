"""Weekly payment batch orchestration.

One run: create or resume the week's batch, claim it, reserve every verified
unpaid reward and pay each customer's aggregate. The batch is then settled:
totals are written, and once every payout is known the reconciliation report
and business invoices are produced.
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from vocilia.models.payment_batch import PaymentBatch, PaymentBatchStatus
from vocilia.repositories.payment_batch_repository import PaymentBatchRepository
from vocilia.repositories.reward_calculation_repository import RewardCalculationRepository
from vocilia.services.batch_settlement import BatchSettlementService
from vocilia.services.batch_weeks import week_bounds
from vocilia.services.payment_client import SwishClientBase
from vocilia.services.payment_processor import PaymentProcessor

logger = logging.getLogger(__name__)


class BatchAlreadyProcessedError(ValueError):
    """The batch for this week has already completed."""


class BatchInProgressError(ValueError):
    """Another run currently holds the batch for this week."""


class BatchScheduler:
    """Runs the weekly payout pipeline for one ISO week."""

    def __init__(self, db: Session, client: SwishClientBase | None = None):
        self.db = db
        self.batch_repo = PaymentBatchRepository(db)
        self.reward_repo = RewardCalculationRepository(db)
        self.settlement = BatchSettlementService(db)
        self.processor = PaymentProcessor(db, client)

    def _claim(self, batch_week: str) -> PaymentBatch:
        week_start, week_end = week_bounds(batch_week)
        batch = self.batch_repo.get_or_create(batch_week, week_start, week_end)

        if batch.status == PaymentBatchStatus.COMPLETED.value:
            raise BatchAlreadyProcessedError(f"Payment batch {batch_week} is already completed")
        if batch.status == PaymentBatchStatus.SETTLING.value:
            raise BatchInProgressError(f"Payment batch {batch_week} is settling in-flight payouts")
        if not self.batch_repo.claim_for_processing(batch.id):  # type: ignore[arg-type]
            self.db.refresh(batch)
            if batch.status == PaymentBatchStatus.COMPLETED.value:
                raise BatchAlreadyProcessedError(
                    f"Payment batch {batch_week} is already completed"
                )
            raise BatchInProgressError(f"Payment batch {batch_week} is already processing")

        self.db.refresh(batch)
        return batch

    def _pay_customers(self, batch_id: UUID) -> int:
        """Pay every customer aggregate reserved for the batch; returns customers paid."""
        aggregates = self.reward_repo.aggregate_pending_by_customer(batch_id=batch_id)
        for aggregate in aggregates:
            self.processor.process_customer_payment(
                batch_id=batch_id,
                customer_phone=aggregate.customer_phone,
                amount_sek=aggregate.total_amount_sek,
                reward_count=aggregate.reward_count,
            )
        return len(aggregates)

    def process_batch(self, batch_week: str) -> PaymentBatch:
        """Create or resume the batch for ``batch_week`` and pay all reserved rewards.

        Payouts Swish has accepted but not yet paid leave the batch
        ``settling`` until the settlement job has their outcome.

        Raises:
            ValueError: ``batch_week`` is not a valid ISO week label.
            BatchAlreadyProcessedError: the week has already completed.
            BatchInProgressError: another run holds the batch, or it is settling.
        """
        batch = self._claim(batch_week)
        batch_id: UUID = batch.id  # type: ignore[assignment]
        logger.info("Processing payment batch %s (%s)", batch_week, batch_id)

        try:
            reserved = self.reward_repo.reserve_for_batch(batch_id)
            logger.info("Reserved %d rewards for batch %s", reserved, batch_week)

            paid_now = self._pay_customers(batch_id)
            batch = self.settlement.refresh_batch(batch_id, claimed=True)
        except Exception as exc:
            self.db.rollback()
            logger.exception("Payment batch %s failed", batch_week)
            self.batch_repo.mark_failed(batch_id, f"{exc.__class__.__name__}: {exc}")
            raise

        logger.info(
            "Payment batch %s %s: %d customers this run, %d total, "
            "%d successful, %d failed, %s SEK paid",
            batch_week,
            batch.status,
            paid_now,
            batch.total_customers,
            batch.successful_payments,
            batch.failed_payments,
            batch.total_amount_sek,
        )
        return batch
