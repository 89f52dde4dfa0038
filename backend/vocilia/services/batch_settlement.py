"""Batch totals, status and the follow-up reports once payouts are known."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from vocilia.models.payment_batch import PaymentBatch, PaymentBatchStatus
from vocilia.models.payment_transaction import PaymentTransactionStatus
from vocilia.repositories.payment_batch_repository import PaymentBatchRepository
from vocilia.repositories.payment_transaction_repository import PaymentTransactionRepository
from vocilia.services.business_invoice_service import BusinessInvoiceService
from vocilia.services.reconciliation_service import ReconciliationService

logger = logging.getLogger(__name__)

# Batches whose counters follow their transactions after the run has ended
REFRESHABLE_STATUSES = (
    PaymentBatchStatus.SETTLING.value,
    PaymentBatchStatus.COMPLETED.value,
    PaymentBatchStatus.FAILED.value,
)

UNSETTLED_TRANSACTION_STATUSES = (
    PaymentTransactionStatus.PENDING.value,
    PaymentTransactionStatus.PROCESSING.value,
)


@dataclass
class BatchRunTotals:
    total_customers: int = 0
    successful_payments: int = 0
    failed_payments: int = 0
    pending_payments: int = 0
    total_amount_sek: Decimal = Decimal("0.00")

    @property
    def final_status(self) -> PaymentBatchStatus:
        if self.pending_payments > 0:
            return PaymentBatchStatus.SETTLING
        if self.total_customers > 0 and self.successful_payments == 0:
            return PaymentBatchStatus.FAILED
        return PaymentBatchStatus.COMPLETED


class BatchSettlementService:
    """Keeps a batch's counters, reconciliation report and invoices in line with its payouts."""

    def __init__(self, db: Session):
        self.db = db
        self.batch_repo = PaymentBatchRepository(db)
        self.txn_repo = PaymentTransactionRepository(db)

    def batch_totals(self, batch_id: UUID) -> BatchRunTotals:
        """Totals over every transaction in the batch, including those of a resumed run."""
        totals = BatchRunTotals()
        for txn in self.txn_repo.get_by_batch(batch_id):
            totals.total_customers += 1
            if txn.status == PaymentTransactionStatus.SUCCESSFUL.value:
                totals.successful_payments += 1
                totals.total_amount_sek += Decimal(str(txn.amount_sek))
            elif txn.status in UNSETTLED_TRANSACTION_STATUSES:
                totals.pending_payments += 1
            else:
                totals.failed_payments += 1
        return totals

    def refresh_batch(self, batch_id: UUID, claimed: bool = False) -> PaymentBatch:
        """Recompute the batch from its transactions.

        A batch with payouts still in flight is left ``settling``. Once every
        payout is known the batch gets its final status and the reconciliation
        report and business invoices are brought up to date.

        Without ``claimed`` only batches whose run has ended are touched; a
        running or crashed batch is rebuilt by its next run instead.
        """
        batch = self.batch_repo.get_by_id(batch_id)
        if not batch:
            logger.error("Cannot refresh unknown payment batch %s", batch_id)
            raise ValueError(f"Payment batch {batch_id} not found")
        if not claimed and (batch.status not in REFRESHABLE_STATUSES or batch.error_message):
            logger.info(
                "Payment batch %s is %s, leaving totals to its next run",
                batch.batch_week,
                batch.status,
            )
            return batch

        totals = self.batch_totals(batch_id)
        batch = self.batch_repo.finish(  # type: ignore[assignment]
            batch_id,
            status=totals.final_status,
            total_customers=totals.total_customers,
            total_amount_sek=totals.total_amount_sek,
            successful_payments=totals.successful_payments,
            failed_payments=totals.failed_payments,
        )
        if totals.pending_payments:
            logger.info(
                "Payment batch %s settling: %d payouts still in flight",
                batch.batch_week,
                totals.pending_payments,
            )
            return batch

        ReconciliationService(self.db).generate_report(batch_id)
        BusinessInvoiceService(self.db).generate_for_batch(batch_id)
        return batch
