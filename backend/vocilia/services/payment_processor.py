"""Payment processor: pays one customer's aggregated rewards through Swish."""

import logging
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from vocilia.core.config import settings
from vocilia.models.payment_failure import FailureResolutionStatus, PaymentFailure
from vocilia.models.payment_transaction import PaymentTransaction, PaymentTransactionStatus
from vocilia.repositories.payment_failure_repository import PaymentFailureRepository
from vocilia.repositories.payment_transaction_repository import PaymentTransactionRepository
from vocilia.repositories.reward_calculation_repository import RewardCalculationRepository
from vocilia.services.batch_settlement import BatchSettlementService
from vocilia.services.payment_client import (
    SwishClientBase,
    SwishPayoutResult,
    SwishPayoutStatus,
    generate_payment_reference,
    get_swish_client,
    is_valid_swish_number,
)

logger = logging.getLogger(__name__)

INVALID_NUMBER_CODE = "INVALID_NUMBER"
CLIENT_ERROR_CODE = "CLIENT_ERROR"


class RetryInProgressError(ValueError):
    """Another retry already claimed the transaction."""


def payout_message(reward_count: int) -> str:
    return f"Vocilia cashback for {reward_count} feedback calls"


class PaymentProcessor:
    """Issues payouts and records transaction and failure rows."""

    def __init__(self, db: Session, client: SwishClientBase | None = None):
        self.db = db
        self.client = client or get_swish_client()
        self.txn_repo = PaymentTransactionRepository(db)
        self.failure_repo = PaymentFailureRepository(db)
        self.reward_repo = RewardCalculationRepository(db)

    def _send(self, transaction: PaymentTransaction) -> SwishPayoutResult:
        """Call the payment client, turning client exceptions into an error result."""
        phone = str(transaction.customer_phone)
        if not is_valid_swish_number(phone):
            return SwishPayoutResult(
                status=SwishPayoutStatus.ERROR,
                error_code=INVALID_NUMBER_CODE,
                error_message="Invalid phone number format for Swish",
            )
        try:
            return self.client.create_payout(
                reference=str(transaction.swish_payment_reference),
                phone=phone,
                amount=Decimal(str(transaction.amount_sek)),
                message=payout_message(int(transaction.reward_count)),
            )
        except Exception as exc:  # recorded as a failed payout, never raised
            logger.exception("Payment client raised for transaction %s", transaction.id)
            return SwishPayoutResult(
                status=SwishPayoutStatus.ERROR,
                error_code=CLIENT_ERROR_CODE,
                error_message=str(exc)[:500] or exc.__class__.__name__,
            )

    def _record_outcome(
        self,
        transaction: PaymentTransaction,
        result: SwishPayoutResult,
        failure: PaymentFailure | None = None,
    ) -> PaymentTransaction:
        """Store a payout result on the transaction and its failure record.

        ``failure`` is the open failure of a transaction being retried.
        """
        txn_id: UUID = transaction.id  # type: ignore[assignment]
        attempts = int(transaction.retry_count)

        if result.succeeded:
            updated = self.txn_repo.mark_successful(txn_id, result.swish_transaction_id)
            if failure:
                self.failure_repo.set_resolution(
                    failure.id,  # type: ignore[arg-type]
                    FailureResolutionStatus.RESOLVED,
                    retry_attempts=attempts,
                )
            return updated or transaction

        if result.pending:
            logger.info(
                "Payout %s accepted by Swish, awaiting settlement",
                transaction.swish_payment_reference,
            )
            return self.txn_repo.mark_in_flight(txn_id, result.swish_transaction_id) or transaction

        reason = result.error_message or "Swish payout failed"
        logger.warning(
            "Payout of %s SEK to %s failed (%s): %s",
            transaction.amount_sek,
            transaction.customer_phone,
            result.error_code,
            reason,
        )
        updated = self.txn_repo.mark_failed(txn_id, reason)
        if failure:
            exhausted = attempts >= settings.SWISH_MAX_RETRY_ATTEMPTS
            self.failure_repo.set_resolution(
                failure.id,  # type: ignore[arg-type]
                FailureResolutionStatus.MANUAL_REVIEW if exhausted else FailureResolutionStatus.PENDING,
                retry_attempts=attempts,
                failure_reason=reason,
            )
        else:
            self.failure_repo.create(txn_id, reason, result.error_code)
        return updated or transaction

    def process_customer_payment(
        self,
        batch_id: UUID,
        customer_phone: str,
        amount_sek: Decimal,
        reward_count: int,
    ) -> PaymentTransaction:
        """Pay one customer's reserved rewards for a batch.

        The customer's rewards are linked to the transaction before the payout
        call, so they can never be aggregated into another payment.
        """
        transaction = self.txn_repo.create(
            batch_id=batch_id,
            customer_phone=customer_phone,
            amount_sek=amount_sek,
            reward_count=reward_count,
            swish_payment_reference=generate_payment_reference(),
        )
        txn_id: UUID = transaction.id  # type: ignore[assignment]
        self.reward_repo.link_to_transaction(batch_id, customer_phone, txn_id)

        return self._record_outcome(transaction, self._send(transaction))

    def retry_failed_transaction(self, transaction_id: UUID) -> PaymentTransaction:
        """Re-send a failed payout on request; never called from the batch loop.

        The transaction is claimed with a conditional update first, so two
        concurrent retries cannot both send the payout.
        """
        transaction = self.txn_repo.get_by_id(transaction_id)
        if not transaction:
            logger.error("Cannot retry unknown payment transaction %s", transaction_id)
            raise ValueError(f"Payment transaction {transaction_id} not found")
        if transaction.status != PaymentTransactionStatus.FAILED.value:
            raise ValueError("Only failed transactions can be retried")
        if int(transaction.retry_count) >= settings.SWISH_MAX_RETRY_ATTEMPTS:
            raise ValueError(
                f"Retry limit of {settings.SWISH_MAX_RETRY_ATTEMPTS} reached for "
                f"transaction {transaction_id}"
            )
        if not self.txn_repo.claim_for_retry(transaction_id, settings.SWISH_MAX_RETRY_ATTEMPTS):
            logger.warning("Payment transaction %s was claimed by another retry", transaction_id)
            raise RetryInProgressError(f"Payment transaction {transaction_id} is already being retried")

        failure = self.failure_repo.get_open_for_transaction(transaction_id)
        if failure:
            self.failure_repo.set_resolution(
                failure.id,  # type: ignore[arg-type]
                FailureResolutionStatus.RETRYING,
            )

        self.db.refresh(transaction)
        attempts = int(transaction.retry_count)
        updated = self._record_outcome(transaction, self._send(transaction), failure)
        logger.info(
            "Retry %d of transaction %s finished as %s", attempts, transaction_id, updated.status
        )

        BatchSettlementService(self.db).refresh_batch(transaction.batch_id)  # type: ignore[arg-type]
        self.db.refresh(updated)
        return updated

    def settle_transaction(self, transaction: PaymentTransaction) -> PaymentTransaction:
        """Ask Swish for the outcome of a payout whose result is not known yet.

        An unreachable Swish leaves the transaction as it is. A payout Swish
        has no record of is failed, which makes it retryable.
        """
        result = self.client.get_payout_status(str(transaction.swish_payment_reference))
        if result.transient:
            logger.warning(
                "Could not settle transaction %s: %s", transaction.id, result.error_message
            )
            return transaction
        if result.pending and transaction.status == PaymentTransactionStatus.PROCESSING.value:
            return transaction
        failure = self.failure_repo.get_open_for_transaction(transaction.id)  # type: ignore[arg-type]
        return self._record_outcome(transaction, result, failure)

    def settle_in_flight_payouts(self, stale_before: datetime | None = None) -> int:
        """Settle every in-flight payout, then refresh the batches they belong to.

        Pending transactions untouched for ``PAYOUT_STALE_AFTER_MINUTES`` are
        included; those are left over by a run that stopped mid-payout.
        Returns the number of transactions that reached a final status.
        """
        cutoff = stale_before or datetime.now(UTC) - timedelta(
            minutes=settings.PAYOUT_STALE_AFTER_MINUTES
        )
        settled = 0
        batch_ids: set[UUID] = set()
        for transaction in self.txn_repo.get_unsettled(cutoff):
            updated = self.settle_transaction(transaction)
            if updated.status in (
                PaymentTransactionStatus.SUCCESSFUL.value,
                PaymentTransactionStatus.FAILED.value,
            ):
                settled += 1
                batch_ids.add(updated.batch_id)  # type: ignore[arg-type]

        settlement = BatchSettlementService(self.db)
        for batch_id in batch_ids:
            settlement.refresh_batch(batch_id)

        if settled:
            logger.info("Settled %d in-flight payouts across %d batches", settled, len(batch_ids))
        return settled
