"""Invoices businesses for the rewards paid to their customers plus the admin fee."""

import logging
from collections import defaultdict
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from vocilia.core.config import settings
from vocilia.models.business_invoice import BusinessInvoice, BusinessInvoiceStatus
from vocilia.models.shared import to_sek
from vocilia.repositories.business_invoice_repository import BusinessInvoiceRepository
from vocilia.repositories.payment_batch_repository import PaymentBatchRepository
from vocilia.repositories.reward_calculation_repository import RewardCalculationRepository

logger = logging.getLogger(__name__)


def calculate_admin_fee(total_rewards_sek: Decimal) -> Decimal:
    return to_sek(total_rewards_sek * Decimal(str(settings.ADMIN_FEE_RATE)))


class BusinessInvoiceService:
    def __init__(self, db: Session):
        self.db = db
        self.invoice_repo = BusinessInvoiceRepository(db)
        self.batch_repo = PaymentBatchRepository(db)
        self.reward_repo = RewardCalculationRepository(db)

    def generate_for_batch(self, batch_id: UUID, issued_at: datetime | None = None) -> list[BusinessInvoice]:
        """Bring each business's invoices for the batch in line with what was paid.

        The first invoice for a business is due ``INVOICE_PAYMENT_TERMS_DAYS``
        after the batch completed. Rewards paid later, by a manual retry or a
        settled payout, are added to the business's pending invoice. When that
        invoice is no longer pending a supplementary invoice is issued, due
        ``INVOICE_PAYMENT_TERMS_DAYS`` from now.

        Returns the invoices created or changed.
        """
        batch = self.batch_repo.get_by_id(batch_id)
        if not batch:
            logger.error("Cannot invoice unknown payment batch %s", batch_id)
            raise ValueError(f"Payment batch {batch_id} not found")

        totals: dict[UUID, Decimal] = defaultdict(lambda: Decimal("0.00"))
        for row in self.reward_repo.store_breakdown(batch_id):
            totals[row.business_id] += row.total_rewards_sek

        terms = timedelta(days=settings.INVOICE_PAYMENT_TERMS_DAYS)
        sequence = self.invoice_repo.count_for_batch(batch_id)

        changed: list[BusinessInvoice] = []
        for business_id in sorted(totals, key=str):
            existing = self.invoice_repo.get_for_batch_and_business(batch_id, business_id)
            invoiced = sum(
                (Decimal(str(invoice.total_rewards_sek)) for invoice in existing), Decimal("0.00")
            )
            outstanding = to_sek(totals[business_id] - invoiced)
            if outstanding < 0:
                logger.warning(
                    "Business %s is invoiced %s SEK more than was paid in %s",
                    business_id,
                    -outstanding,
                    batch.batch_week,
                )
                continue
            if outstanding == 0:
                continue

            open_invoice = next(
                (
                    invoice
                    for invoice in reversed(existing)
                    if invoice.status == BusinessInvoiceStatus.PENDING.value
                ),
                None,
            )
            if open_invoice is not None:
                rewards = to_sek(Decimal(str(open_invoice.total_rewards_sek)) + outstanding)
                invoice = self.invoice_repo.update_amounts(
                    open_invoice.id,  # type: ignore[arg-type]
                    total_rewards_sek=rewards,
                    admin_fee_sek=calculate_admin_fee(rewards),
                )
                logger.info(
                    "Added %s SEK to invoice %s", outstanding, open_invoice.invoice_number
                )
            else:
                if existing:
                    issued = issued_at or datetime.now(UTC)
                else:
                    issued = issued_at or batch.completed_at or datetime.now(UTC)  # type: ignore[assignment]
                sequence += 1
                invoice = self.invoice_repo.create(
                    batch_id=batch_id,
                    business_id=business_id,
                    invoice_number=f"INV-{batch.batch_week}-{sequence:03d}",
                    total_rewards_sek=outstanding,
                    admin_fee_sek=calculate_admin_fee(outstanding),
                    due_date=issued + terms,
                )
                if existing:
                    logger.info(
                        "Issued supplementary invoice %s for business %s",
                        invoice.invoice_number,
                        business_id,
                    )
            changed.append(invoice)  # type: ignore[arg-type]

        if changed:
            logger.info("Created or updated %d business invoices for %s", len(changed), batch.batch_week)
        return changed

    def mark_overdue_invoices(self, now: datetime | None = None) -> int:
        count = self.invoice_repo.mark_overdue(now or datetime.now(UTC))
        if count > 0:
            logger.info("Marked %d business invoices overdue", count)
        return count
