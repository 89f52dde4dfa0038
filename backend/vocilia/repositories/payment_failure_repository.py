"""Payment failure repository."""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.orm import Session

from vocilia.models.payment_failure import FailureResolutionStatus, PaymentFailure

OPEN_STATUSES = (
    FailureResolutionStatus.PENDING.value,
    FailureResolutionStatus.RETRYING.value,
)


class PaymentFailureRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        payment_transaction_id: UUID,
        failure_reason: str,
        swish_error_code: str | None = None,
    ) -> PaymentFailure:
        failure = PaymentFailure(
            payment_transaction_id=payment_transaction_id,
            failure_reason=failure_reason,
            swish_error_code=swish_error_code,
            resolution_status=FailureResolutionStatus.PENDING.value,
        )
        self.db.add(failure)
        self.db.commit()
        self.db.refresh(failure)
        return failure

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        resolution_status: FailureResolutionStatus | None = None,
        payment_transaction_id: UUID | None = None,
    ) -> list[PaymentFailure]:
        query = self.db.query(PaymentFailure)
        if resolution_status:
            query = query.filter(PaymentFailure.resolution_status == resolution_status.value)
        if payment_transaction_id:
            query = query.filter(PaymentFailure.payment_transaction_id == payment_transaction_id)
        return query.order_by(PaymentFailure.created_at.desc()).offset(skip).limit(limit).all()

    def get_open_for_transaction(self, payment_transaction_id: UUID) -> PaymentFailure | None:
        """Most recent unresolved failure for a transaction."""
        return (
            self.db.query(PaymentFailure)
            .filter(
                PaymentFailure.payment_transaction_id == payment_transaction_id,
                PaymentFailure.resolution_status.in_(OPEN_STATUSES),
            )
            .order_by(PaymentFailure.created_at.desc())
            .first()
        )

    def set_resolution(
        self,
        failure_id: UUID,
        status: FailureResolutionStatus,
        retry_attempts: int | None = None,
        failure_reason: str | None = None,
    ) -> PaymentFailure | None:
        failure = self.db.query(PaymentFailure).filter(PaymentFailure.id == failure_id).first()
        if not failure:
            return None

        failure.resolution_status = status.value  # type: ignore[assignment]
        if retry_attempts is not None:
            failure.retry_attempts = retry_attempts  # type: ignore[assignment]
        if failure_reason:
            failure.failure_reason = failure_reason  # type: ignore[assignment]
        if status == FailureResolutionStatus.RESOLVED:
            failure.resolved_at = datetime.now(UTC)  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(failure)
        return failure
