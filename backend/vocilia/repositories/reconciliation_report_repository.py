"""Reconciliation report repository."""

from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from vocilia.models.reconciliation_report import ReconciliationReport


class ReconciliationReportRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, report_id: UUID) -> ReconciliationReport | None:
        return (
            self.db.query(ReconciliationReport)
            .filter(ReconciliationReport.id == report_id)
            .first()
        )

    def get_by_batch_id(self, batch_id: UUID) -> ReconciliationReport | None:
        return (
            self.db.query(ReconciliationReport)
            .filter(ReconciliationReport.batch_id == batch_id)
            .first()
        )

    def get_all(self, skip: int = 0, limit: int = 100) -> list[ReconciliationReport]:
        return (
            self.db.query(ReconciliationReport)
            .order_by(ReconciliationReport.report_period.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def upsert(
        self,
        batch_id: UUID,
        report_period: str,
        total_rewards_paid_sek: Decimal,
        admin_fees_collected_sek: Decimal,
        payment_success_count: int,
        payment_failure_count: int,
        discrepancy_amount_sek: Decimal,
        store_breakdown: list[dict[str, Any]],
        discrepancies: list[dict[str, Any]],
    ) -> ReconciliationReport:
        """Create the report for a batch, or replace the existing one in place."""
        report = self.get_by_batch_id(batch_id)
        if report is None:
            report = ReconciliationReport(batch_id=batch_id)
            self.db.add(report)

        report.report_period = report_period
        report.total_rewards_paid_sek = total_rewards_paid_sek
        report.admin_fees_collected_sek = admin_fees_collected_sek
        report.payment_success_count = payment_success_count
        report.payment_failure_count = payment_failure_count
        report.discrepancy_count = len(discrepancies)
        report.discrepancy_amount_sek = discrepancy_amount_sek
        report.store_breakdown = store_breakdown
        report.discrepancies = discrepancies

        self.db.commit()
        self.db.refresh(report)
        return report
