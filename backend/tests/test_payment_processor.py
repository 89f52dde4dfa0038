"""Tests for single-customer payouts and manual retries."""

import uuid
from decimal import Decimal

import pytest

from vocilia.models.payment_batch import PaymentBatchStatus
from vocilia.models.payment_failure import FailureResolutionStatus
from vocilia.models.payment_transaction import PaymentTransactionStatus
from vocilia.repositories.payment_batch_repository import PaymentBatchRepository
from vocilia.repositories.payment_failure_repository import PaymentFailureRepository
from vocilia.repositories.payment_transaction_repository import PaymentTransactionRepository
from vocilia.repositories.reward_calculation_repository import RewardCalculationRepository
from vocilia.services.batch_scheduler import BatchScheduler
from vocilia.services.batch_weeks import week_bounds
from vocilia.services.payment_client import MockSwishClient
from vocilia.services.payment_processor import PaymentProcessor, payout_message

WEEK = "2025-W09"


@pytest.fixture
def batch(db_session):
    repo = PaymentBatchRepository(db_session)
    return repo.get_or_create(WEEK, *week_bounds(WEEK))


def _failed_batch_transaction(db_session, make_reward):
    """Run a batch in which the single payout fails; return the failed transaction."""
    make_reward(customer_phone="0701111111", transaction_amount_sek="200.00", rating=4)
    client = MockSwishClient(failing_numbers={"0701111111"})
    batch = BatchScheduler(db_session, client).process_batch(WEEK)
    return PaymentBatchRepository(db_session).get_by_id(batch.id), client


class TestProcessCustomerPayment:
    def test_successful_payment_links_rewards(self, db_session, make_reward, batch):
        reward = make_reward(customer_phone="0701111111")
        reward_repo = RewardCalculationRepository(db_session)
        reward_repo.reserve_for_batch(batch.id)

        processor = PaymentProcessor(db_session, MockSwishClient())
        txn = processor.process_customer_payment(batch.id, "0701111111", Decimal("5.00"), 1)

        assert txn.status == PaymentTransactionStatus.SUCCESSFUL.value
        assert txn.processed_at is not None
        assert len(txn.swish_payment_reference) == 32
        assert reward_repo.get_by_id(reward.id).payment_transaction_id == txn.id

    def test_failed_payment_records_failure(self, db_session, make_reward, batch):
        make_reward(customer_phone="0701111111")
        RewardCalculationRepository(db_session).reserve_for_batch(batch.id)

        client = MockSwishClient(failing_numbers={"0701111111"}, error_code="RF07")
        txn = PaymentProcessor(db_session, client).process_customer_payment(
            batch.id, "0701111111", Decimal("5.00"), 1
        )

        assert txn.status == PaymentTransactionStatus.FAILED.value
        assert txn.failure_reason == "Payee is not Swish enrolled"
        failures = PaymentFailureRepository(db_session).get_all(payment_transaction_id=txn.id)
        assert len(failures) == 1
        assert failures[0].swish_error_code == "RF07"
        assert failures[0].resolution_status == FailureResolutionStatus.PENDING.value

    def test_invalid_number_never_reaches_client(self, db_session, batch):
        client = MockSwishClient()
        txn = PaymentProcessor(db_session, client).process_customer_payment(
            batch.id, "12345", Decimal("5.00"), 1
        )

        assert txn.status == PaymentTransactionStatus.FAILED.value
        assert client.payouts == {}
        failure = PaymentFailureRepository(db_session).get_all()[0]
        assert failure.swish_error_code == "INVALID_NUMBER"

    def test_payout_message(self):
        assert payout_message(3) == "Vocilia cashback for 3 feedback calls"


class TestRetryFailedTransaction:
    def test_retry_success_updates_batch(self, db_session, make_reward):
        batch, _ = _failed_batch_transaction(db_session, make_reward)
        assert batch.status == PaymentBatchStatus.FAILED.value
        txn = PaymentFailureRepository(db_session).get_all()[0].payment_transaction_id

        txn_after = PaymentProcessor(db_session, MockSwishClient()).retry_failed_transaction(txn)

        assert txn_after.status == PaymentTransactionStatus.SUCCESSFUL.value
        assert txn_after.retry_count == 1
        failure = PaymentFailureRepository(db_session).get_all()[0]
        assert failure.resolution_status == FailureResolutionStatus.RESOLVED.value
        assert failure.resolved_at is not None

        batch = PaymentBatchRepository(db_session).get_by_id(batch.id)
        assert batch.status == PaymentBatchStatus.COMPLETED.value
        assert batch.successful_payments == 1
        assert batch.failed_payments == 0
        assert batch.total_amount_sek == Decimal("10.00")

    def test_retry_failure_keeps_failure_open(self, db_session, make_reward):
        _, client = _failed_batch_transaction(db_session, make_reward)
        txn = PaymentFailureRepository(db_session).get_all()[0].payment_transaction_id

        txn_after = PaymentProcessor(db_session, client).retry_failed_transaction(txn)

        assert txn_after.status == PaymentTransactionStatus.FAILED.value
        failures = PaymentFailureRepository(db_session).get_all()
        assert len(failures) == 1
        assert failures[0].resolution_status == FailureResolutionStatus.PENDING.value
        assert failures[0].retry_attempts == 1

    def test_exhausted_retries_go_to_manual_review(self, db_session, make_reward):
        _, client = _failed_batch_transaction(db_session, make_reward)
        txn = PaymentFailureRepository(db_session).get_all()[0].payment_transaction_id
        processor = PaymentProcessor(db_session, client)

        for _ in range(3):
            processor.retry_failed_transaction(txn)

        failure = PaymentFailureRepository(db_session).get_all()[0]
        assert failure.resolution_status == FailureResolutionStatus.MANUAL_REVIEW.value
        with pytest.raises(ValueError, match="Retry limit"):
            processor.retry_failed_transaction(txn)

    def test_only_failed_transactions_can_be_retried(self, db_session, make_reward):
        make_reward(customer_phone="0701111111")
        batch = BatchScheduler(db_session, MockSwishClient()).process_batch(WEEK)
        txn = PaymentTransactionRepository(db_session).get_by_batch(batch.id)[0]
        with pytest.raises(ValueError, match="Only failed"):
            PaymentProcessor(db_session, MockSwishClient()).retry_failed_transaction(txn.id)

    def test_unknown_transaction(self, db_session):
        with pytest.raises(ValueError, match="not found"):
            PaymentProcessor(db_session, MockSwishClient()).retry_failed_transaction(uuid.uuid4())
