"""Business invoice repository."""

from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from vocilia.core.sorting import apply_order_by
from vocilia.models.business_invoice import BusinessInvoice, BusinessInvoiceStatus

SORTABLE_FIELDS = frozenset({"created_at", "due_date", "total_amount_sek", "invoice_number"})


class BusinessInvoiceRepository:
    """Repository for BusinessInvoice model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        business_id: UUID | None = None,
        batch_id: UUID | None = None,
        status: BusinessInvoiceStatus | None = None,
        order_by: str | None = None,
    ) -> list[BusinessInvoice]:
        query = self.db.query(BusinessInvoice)

        if business_id is not None:
            query = query.filter(BusinessInvoice.business_id == business_id)
        if batch_id is not None:
            query = query.filter(BusinessInvoice.batch_id == batch_id)
        if status:
            query = query.filter(BusinessInvoice.status == status.value)

        query = apply_order_by(query, BusinessInvoice, order_by, SORTABLE_FIELDS)
        return query.offset(skip).limit(limit).all()

    def get_by_id(
        self, invoice_id: UUID, business_id: UUID | None = None
    ) -> BusinessInvoice | None:
        """Get an invoice by ID, optionally scoped to one business."""
        query = self.db.query(BusinessInvoice).filter(BusinessInvoice.id == invoice_id)
        if business_id is not None:
            query = query.filter(BusinessInvoice.business_id == business_id)
        return query.first()

    def get_for_batch_and_business(self, batch_id: UUID, business_id: UUID) -> list[BusinessInvoice]:
        """Every invoice for one business in a batch, the original first."""
        return (
            self.db.query(BusinessInvoice)
            .filter(
                BusinessInvoice.batch_id == batch_id,
                BusinessInvoice.business_id == business_id,
            )
            .order_by(BusinessInvoice.created_at, BusinessInvoice.invoice_number)
            .all()
        )

    def count_for_batch(self, batch_id: UUID) -> int:
        return self.db.query(BusinessInvoice).filter(BusinessInvoice.batch_id == batch_id).count()

    def create(
        self,
        batch_id: UUID,
        business_id: UUID,
        invoice_number: str,
        total_rewards_sek: Decimal,
        admin_fee_sek: Decimal,
        due_date: datetime,
    ) -> BusinessInvoice:
        invoice = BusinessInvoice(
            batch_id=batch_id,
            business_id=business_id,
            invoice_number=invoice_number,
            total_rewards_sek=total_rewards_sek,
            admin_fee_sek=admin_fee_sek,
            total_amount_sek=total_rewards_sek + admin_fee_sek,
            status=BusinessInvoiceStatus.PENDING.value,
            due_date=due_date,
        )
        self.db.add(invoice)
        self.db.commit()
        self.db.refresh(invoice)
        return invoice

    def update_amounts(
        self, invoice_id: UUID, total_rewards_sek: Decimal, admin_fee_sek: Decimal
    ) -> BusinessInvoice | None:
        invoice = self.get_by_id(invoice_id)
        if not invoice:
            return None

        invoice.total_rewards_sek = total_rewards_sek  # type: ignore[assignment]
        invoice.admin_fee_sek = admin_fee_sek  # type: ignore[assignment]
        invoice.total_amount_sek = total_rewards_sek + admin_fee_sek  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(invoice)
        return invoice

    def mark_paid(self, invoice_id: UUID) -> BusinessInvoice | None:
        invoice = self.get_by_id(invoice_id)
        if not invoice:
            return None
        if invoice.status == BusinessInvoiceStatus.PAID.value:
            raise ValueError("Invoice is already paid")

        invoice.status = BusinessInvoiceStatus.PAID.value  # type: ignore[assignment]
        invoice.paid_at = datetime.now(UTC)  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(invoice)
        return invoice

    def mark_disputed(self, invoice_id: UUID, business_id: UUID | None = None) -> BusinessInvoice | None:
        invoice = self.get_by_id(invoice_id, business_id=business_id)
        if not invoice:
            return None
        if invoice.status == BusinessInvoiceStatus.PAID.value:
            raise ValueError("Paid invoices cannot be disputed")

        invoice.status = BusinessInvoiceStatus.DISPUTED.value  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(invoice)
        return invoice

    def mark_overdue(self, now: datetime) -> int:
        """Flag every pending invoice whose due date has passed."""
        count = (
            self.db.query(BusinessInvoice)
            .filter(
                BusinessInvoice.status == BusinessInvoiceStatus.PENDING.value,
                BusinessInvoice.due_date < now,
            )
            .update(
                {BusinessInvoice.status: BusinessInvoiceStatus.OVERDUE.value},
                synchronize_session=False,
            )
        )
        self.db.commit()
        return int(count)
