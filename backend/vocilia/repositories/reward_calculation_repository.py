"""Reward calculation repository.

Pending rewards by customer, the store breakdown and per-transaction sums
each run as a single grouped SQL statement.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from vocilia.core.sorting import apply_order_by
from vocilia.models.payment_transaction import PaymentTransaction, PaymentTransactionStatus
from vocilia.models.reward_calculation import RewardCalculation
from vocilia.models.shared import to_sek
from vocilia.schemas.reward_calculation import RewardCalculationCreate

SORTABLE_FIELDS = frozenset({"created_at", "reward_amount_sek", "customer_phone"})


@dataclass
class CustomerRewardAggregate:
    customer_phone: str
    total_amount_sek: Decimal
    reward_count: int


@dataclass
class StoreRewardTotal:
    store_id: UUID
    business_id: UUID
    total_rewards_sek: Decimal
    reward_count: int


class RewardCalculationRepository:
    """Repository for RewardCalculation model."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        data: RewardCalculationCreate,
        reward_percentage: Decimal,
        reward_amount_sek: Decimal,
    ) -> RewardCalculation:
        reward = RewardCalculation(
            **data.model_dump(),
            reward_percentage=reward_percentage,
            reward_amount_sek=reward_amount_sek,
        )
        self.db.add(reward)
        self.db.commit()
        self.db.refresh(reward)
        return reward

    def get_by_id(self, reward_id: UUID) -> RewardCalculation | None:
        return self.db.query(RewardCalculation).filter(RewardCalculation.id == reward_id).first()

    def get_by_feedback_id(self, feedback_id: UUID) -> RewardCalculation | None:
        return (
            self.db.query(RewardCalculation)
            .filter(RewardCalculation.feedback_id == feedback_id)
            .first()
        )

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        business_id: UUID | None = None,
        store_id: UUID | None = None,
        customer_phone: str | None = None,
        verified: bool | None = None,
        paid: bool | None = None,
        payment_transaction_id: UUID | None = None,
        order_by: str | None = None,
    ) -> list[RewardCalculation]:
        """Get reward calculations with optional filters."""
        query = self.db.query(RewardCalculation)

        if business_id is not None:
            query = query.filter(RewardCalculation.business_id == business_id)
        if store_id is not None:
            query = query.filter(RewardCalculation.store_id == store_id)
        if customer_phone:
            query = query.filter(RewardCalculation.customer_phone == customer_phone)
        if verified is not None:
            query = query.filter(RewardCalculation.verified_by_business == verified)
        if paid is True:
            query = query.filter(RewardCalculation.payment_transaction_id.isnot(None))
        elif paid is False:
            query = query.filter(RewardCalculation.payment_transaction_id.is_(None))
        if payment_transaction_id is not None:
            query = query.filter(RewardCalculation.payment_transaction_id == payment_transaction_id)

        query = apply_order_by(query, RewardCalculation, order_by, SORTABLE_FIELDS)
        return query.offset(skip).limit(limit).all()

    def verify(self, business_id: UUID, reward_ids: list[UUID]) -> int:
        """Mark the business's own unverified, unpaid rewards as verified."""
        count = (
            self.db.query(RewardCalculation)
            .filter(
                RewardCalculation.id.in_(reward_ids),
                RewardCalculation.business_id == business_id,
                RewardCalculation.verified_by_business.is_(False),
                RewardCalculation.payment_transaction_id.is_(None),
            )
            .update(
                {
                    RewardCalculation.verified_by_business: True,
                    RewardCalculation.verified_at: datetime.now(UTC),
                },
                synchronize_session=False,
            )
        )
        self.db.commit()
        return int(count)

    def reserve_for_batch(self, batch_id: UUID) -> int:
        """Claim every verified, unpaid, unclaimed reward for a batch.

        Runs as one conditional UPDATE so concurrent batches never see the
        same row.
        """
        count = (
            self.db.query(RewardCalculation)
            .filter(
                RewardCalculation.verified_by_business.is_(True),
                RewardCalculation.payment_transaction_id.is_(None),
                RewardCalculation.claimed_batch_id.is_(None),
            )
            .update({RewardCalculation.claimed_batch_id: batch_id}, synchronize_session=False)
        )
        self.db.commit()
        return int(count)

    def aggregate_pending_by_customer(
        self, batch_id: UUID | None = None
    ) -> list[CustomerRewardAggregate]:
        """Sum verified, unpaid rewards per customer phone.

        With ``batch_id`` only rewards reserved for that batch are counted.
        """
        query = self.db.query(
            RewardCalculation.customer_phone,
            func.sum(RewardCalculation.reward_amount_sek),
            func.count(RewardCalculation.id),
        ).filter(
            RewardCalculation.verified_by_business.is_(True),
            RewardCalculation.payment_transaction_id.is_(None),
        )
        if batch_id is not None:
            query = query.filter(RewardCalculation.claimed_batch_id == batch_id)

        rows = (
            query.group_by(RewardCalculation.customer_phone)
            .order_by(RewardCalculation.customer_phone)
            .all()
        )
        return [
            CustomerRewardAggregate(
                customer_phone=phone,
                total_amount_sek=to_sek(total or 0),
                reward_count=int(count),
            )
            for phone, total, count in rows
        ]

    def link_to_transaction(
        self, batch_id: UUID, customer_phone: str, payment_transaction_id: UUID
    ) -> int:
        """Consume the customer's rewards reserved for ``batch_id``."""
        count = (
            self.db.query(RewardCalculation)
            .filter(
                RewardCalculation.claimed_batch_id == batch_id,
                RewardCalculation.customer_phone == customer_phone,
                RewardCalculation.payment_transaction_id.is_(None),
            )
            .update(
                {RewardCalculation.payment_transaction_id: payment_transaction_id},
                synchronize_session=False,
            )
        )
        self.db.commit()
        return int(count)

    def store_breakdown(self, batch_id: UUID) -> list[StoreRewardTotal]:
        """Paid rewards per store for the successful transactions of a batch."""
        rows = (
            self.db.query(
                RewardCalculation.store_id,
                RewardCalculation.business_id,
                func.sum(RewardCalculation.reward_amount_sek),
                func.count(RewardCalculation.id),
            )
            .join(
                PaymentTransaction,
                PaymentTransaction.id == RewardCalculation.payment_transaction_id,
            )
            .filter(
                PaymentTransaction.batch_id == batch_id,
                PaymentTransaction.status == PaymentTransactionStatus.SUCCESSFUL.value,
            )
            .group_by(RewardCalculation.store_id, RewardCalculation.business_id)
            .order_by(RewardCalculation.business_id, RewardCalculation.store_id)
            .all()
        )
        return [
            StoreRewardTotal(
                store_id=store_id,
                business_id=business_id,
                total_rewards_sek=to_sek(total or 0),
                reward_count=int(count),
            )
            for store_id, business_id, total, count in rows
        ]

    def sum_by_transaction(self, batch_id: UUID) -> dict[UUID, Decimal]:
        """Sum of linked reward amounts keyed by payment transaction id."""
        rows = (
            self.db.query(
                RewardCalculation.payment_transaction_id,
                func.sum(RewardCalculation.reward_amount_sek),
            )
            .join(
                PaymentTransaction,
                PaymentTransaction.id == RewardCalculation.payment_transaction_id,
            )
            .filter(PaymentTransaction.batch_id == batch_id)
            .group_by(RewardCalculation.payment_transaction_id)
            .all()
        )
        return {txn_id: to_sek(total or 0) for txn_id, total in rows}
