"""Payment transaction repository for data access."""

from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from vocilia.core.sorting import apply_order_by
from vocilia.models.payment_transaction import PaymentTransaction, PaymentTransactionStatus

SORTABLE_FIELDS = frozenset({"created_at", "amount_sek", "customer_phone", "processed_at"})


class PaymentTransactionRepository:
    """Repository for PaymentTransaction model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        batch_id: UUID | None = None,
        status: PaymentTransactionStatus | None = None,
        customer_phone: str | None = None,
        order_by: str | None = None,
    ) -> list[PaymentTransaction]:
        """Get all payment transactions with optional filters."""
        query = self.db.query(PaymentTransaction)

        if batch_id:
            query = query.filter(PaymentTransaction.batch_id == batch_id)
        if status:
            query = query.filter(PaymentTransaction.status == status.value)
        if customer_phone:
            query = query.filter(PaymentTransaction.customer_phone == customer_phone)

        query = apply_order_by(query, PaymentTransaction, order_by, SORTABLE_FIELDS)
        return query.offset(skip).limit(limit).all()

    def get_by_batch(self, batch_id: UUID) -> list[PaymentTransaction]:
        return (
            self.db.query(PaymentTransaction)
            .filter(PaymentTransaction.batch_id == batch_id)
            .order_by(PaymentTransaction.customer_phone)
            .all()
        )

    def get_by_id(self, transaction_id: UUID) -> PaymentTransaction | None:
        return (
            self.db.query(PaymentTransaction)
            .filter(PaymentTransaction.id == transaction_id)
            .first()
        )

    def create(
        self,
        batch_id: UUID,
        customer_phone: str,
        amount_sek: Decimal,
        reward_count: int,
        swish_payment_reference: str,
    ) -> PaymentTransaction:
        """Create a pending transaction, ready for the payout call."""
        transaction = PaymentTransaction(
            batch_id=batch_id,
            customer_phone=customer_phone,
            amount_sek=amount_sek,
            reward_count=reward_count,
            swish_payment_reference=swish_payment_reference,
            status=PaymentTransactionStatus.PENDING.value,
        )
        self.db.add(transaction)
        self.db.commit()
        self.db.refresh(transaction)
        return transaction

    def get_unsettled(self, stale_before: datetime) -> list[PaymentTransaction]:
        """Transactions whose payout outcome is not known yet.

        Processing transactions were accepted by Swish and are in flight.
        Pending ones count only once untouched since ``stale_before``, so a
        payout that is being sent right now is left alone.
        """
        return (
            self.db.query(PaymentTransaction)
            .filter(
                or_(
                    PaymentTransaction.status == PaymentTransactionStatus.PROCESSING.value,
                    and_(
                        PaymentTransaction.status == PaymentTransactionStatus.PENDING.value,
                        PaymentTransaction.updated_at < stale_before,
                    ),
                )
            )
            .order_by(PaymentTransaction.created_at)
            .all()
        )

    def claim_for_retry(self, transaction_id: UUID, max_attempts: int) -> bool:
        """Atomically move a failed transaction back to pending for one more attempt.

        Returns False when the transaction is not failed or has no attempts
        left, e.g. because a concurrent retry claimed it first.
        """
        claimed = (
            self.db.query(PaymentTransaction)
            .filter(
                PaymentTransaction.id == transaction_id,
                PaymentTransaction.status == PaymentTransactionStatus.FAILED.value,
                PaymentTransaction.retry_count < max_attempts,
            )
            .update(
                {
                    PaymentTransaction.status: PaymentTransactionStatus.PENDING.value,
                    PaymentTransaction.retry_count: PaymentTransaction.retry_count + 1,
                },
                synchronize_session=False,
            )
        )
        self.db.commit()
        return claimed == 1

    def mark_in_flight(
        self, transaction_id: UUID, swish_transaction_id: str | None = None
    ) -> PaymentTransaction | None:
        """Swish accepted the payout but has not paid it yet."""
        transaction = self.get_by_id(transaction_id)
        if not transaction:
            return None

        transaction.status = PaymentTransactionStatus.PROCESSING.value  # type: ignore[assignment]
        if swish_transaction_id:
            transaction.swish_transaction_id = swish_transaction_id  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(transaction)
        return transaction

    def mark_successful(
        self, transaction_id: UUID, swish_transaction_id: str | None = None
    ) -> PaymentTransaction | None:
        transaction = self.get_by_id(transaction_id)
        if not transaction:
            return None

        transaction.status = PaymentTransactionStatus.SUCCESSFUL.value  # type: ignore[assignment]
        if swish_transaction_id:
            transaction.swish_transaction_id = swish_transaction_id  # type: ignore[assignment]
        transaction.failure_reason = None  # type: ignore[assignment]
        transaction.processed_at = datetime.now(UTC)  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(transaction)
        return transaction

    def mark_failed(self, transaction_id: UUID, reason: str) -> PaymentTransaction | None:
        transaction = self.get_by_id(transaction_id)
        if not transaction:
            return None

        transaction.status = PaymentTransactionStatus.FAILED.value  # type: ignore[assignment]
        transaction.failure_reason = reason  # type: ignore[assignment]
        transaction.processed_at = datetime.now(UTC)  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(transaction)
        return transaction
