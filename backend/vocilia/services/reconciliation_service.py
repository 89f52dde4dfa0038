"""Reconciliation of a finished payment batch."""

import logging
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from vocilia.core.config import settings
from vocilia.models.payment_transaction import PaymentTransactionStatus
from vocilia.models.reconciliation_report import ReconciliationReport
from vocilia.models.shared import to_sek
from vocilia.repositories.payment_batch_repository import PaymentBatchRepository
from vocilia.repositories.payment_transaction_repository import PaymentTransactionRepository
from vocilia.repositories.reconciliation_report_repository import ReconciliationReportRepository
from vocilia.repositories.reward_calculation_repository import RewardCalculationRepository

logger = logging.getLogger(__name__)


class ReconciliationService:
    """Builds the reconciliation report for a batch."""

    def __init__(self, db: Session):
        self.db = db
        self.batch_repo = PaymentBatchRepository(db)
        self.txn_repo = PaymentTransactionRepository(db)
        self.reward_repo = RewardCalculationRepository(db)
        self.report_repo = ReconciliationReportRepository(db)

    def store_breakdown(self, batch_id: UUID) -> list[dict[str, Any]]:
        """Paid rewards and admin fees per store, JSON-ready."""
        fee_rate = Decimal(str(settings.ADMIN_FEE_RATE))
        return [
            {
                "store_id": str(row.store_id),
                "business_id": str(row.business_id),
                "reward_count": row.reward_count,
                "total_rewards_sek": str(row.total_rewards_sek),
                "admin_fee_sek": str(to_sek(row.total_rewards_sek * fee_rate)),
            }
            for row in self.reward_repo.store_breakdown(batch_id)
        ]

    def calculate_discrepancies(self, batch_id: UUID) -> list[dict[str, Any]]:
        """Transactions whose amount differs from their linked rewards, plus failed payouts.

        For a failed payout the whole expected amount is outstanding.
        """
        linked_totals = self.reward_repo.sum_by_transaction(batch_id)
        discrepancies: list[dict[str, Any]] = []

        for txn in self.txn_repo.get_by_batch(batch_id):
            expected = linked_totals.get(txn.id, Decimal("0.00"))  # type: ignore[call-overload]
            amount = to_sek(txn.amount_sek)

            if txn.status == PaymentTransactionStatus.FAILED.value:
                discrepancies.append(
                    {
                        "payment_transaction_id": str(txn.id),
                        "customer_phone": txn.customer_phone,
                        "type": "payment_failed",
                        "expected_amount_sek": str(expected),
                        "actual_amount_sek": "0.00",
                        "difference_sek": str(expected),
                        "reason": txn.failure_reason,
                    }
                )
            elif amount != expected:
                discrepancies.append(
                    {
                        "payment_transaction_id": str(txn.id),
                        "customer_phone": txn.customer_phone,
                        "type": "amount_mismatch",
                        "expected_amount_sek": str(expected),
                        "actual_amount_sek": str(amount),
                        "difference_sek": str(amount - expected),
                        "reason": None,
                    }
                )
        return discrepancies

    def generate_report(self, batch_id: UUID) -> ReconciliationReport:
        """Create or replace the reconciliation report for a batch."""
        batch = self.batch_repo.get_by_id(batch_id)
        if not batch:
            logger.error("Cannot reconcile unknown payment batch %s", batch_id)
            raise ValueError(f"Payment batch {batch_id} not found")

        breakdown = self.store_breakdown(batch_id)
        discrepancies = self.calculate_discrepancies(batch_id)

        total_paid = sum((Decimal(row["total_rewards_sek"]) for row in breakdown), Decimal("0.00"))
        admin_fees = to_sek(total_paid * Decimal(str(settings.ADMIN_FEE_RATE)))
        discrepancy_amount = sum(
            (abs(Decimal(d["difference_sek"])) for d in discrepancies), Decimal("0.00")
        )

        transactions = self.txn_repo.get_by_batch(batch_id)
        success_count = sum(
            1 for t in transactions if t.status == PaymentTransactionStatus.SUCCESSFUL.value
        )
        failure_count = sum(
            1 for t in transactions if t.status == PaymentTransactionStatus.FAILED.value
        )

        report = self.report_repo.upsert(
            batch_id=batch_id,
            report_period=str(batch.batch_week),
            total_rewards_paid_sek=to_sek(total_paid),
            admin_fees_collected_sek=admin_fees,
            payment_success_count=success_count,
            payment_failure_count=failure_count,
            discrepancy_amount_sek=to_sek(discrepancy_amount),
            store_breakdown=breakdown,
            discrepancies=discrepancies,
        )
        logger.info(
            "Reconciliation for %s: %s SEK paid, %d discrepancies",
            batch.batch_week,
            report.total_rewards_paid_sek,
            report.discrepancy_count,
        )
        return report
