"""Tests for business invoicing."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from vocilia.models.business_invoice import BusinessInvoiceStatus
from vocilia.repositories.business_invoice_repository import BusinessInvoiceRepository
from vocilia.services.batch_scheduler import BatchScheduler
from vocilia.services.business_invoice_service import BusinessInvoiceService, calculate_admin_fee
from vocilia.services.payment_client import MockSwishClient

WEEK = "2025-W09"


def test_admin_fee_is_twenty_percent():
    assert calculate_admin_fee(Decimal("100.00")) == Decimal("20.00")
    assert calculate_admin_fee(Decimal("0.03")) == Decimal("0.01")


class TestBusinessInvoiceService:
    def test_invoice_due_in_seven_days(self, db_session, make_reward):
        make_reward(transaction_amount_sek="1000.00", rating=4)
        batch = BatchScheduler(db_session, MockSwishClient()).process_batch(WEEK)

        invoice = BusinessInvoiceRepository(db_session).get_all(batch_id=batch.id)[0]
        assert invoice.invoice_number == "INV-2025-W09-001"
        assert invoice.total_rewards_sek == Decimal("50.00")
        assert invoice.admin_fee_sek == Decimal("10.00")
        assert invoice.total_amount_sek == Decimal("60.00")
        assert invoice.status == BusinessInvoiceStatus.PENDING.value
        assert invoice.due_date.date() == (datetime.now(UTC) + timedelta(days=7)).date()

    def test_no_invoice_for_failed_payouts(self, db_session, make_reward):
        make_reward(customer_phone="0701111111")
        client = MockSwishClient(failing_numbers={"0701111111"})
        batch = BatchScheduler(db_session, client).process_batch(WEEK)

        assert BusinessInvoiceRepository(db_session).get_all(batch_id=batch.id) == []

    def test_generation_is_idempotent(self, db_session, make_reward):
        make_reward()
        batch = BatchScheduler(db_session, MockSwishClient()).process_batch(WEEK)

        changed = BusinessInvoiceService(db_session).generate_for_batch(batch.id)

        assert changed == []
        assert BusinessInvoiceRepository(db_session).count_for_batch(batch.id) == 1

    def test_mark_overdue(self, db_session, make_reward):
        make_reward()
        batch = BatchScheduler(db_session, MockSwishClient()).process_batch(WEEK)
        service = BusinessInvoiceService(db_session)

        assert service.mark_overdue_invoices(now=datetime.now(UTC)) == 0
        assert service.mark_overdue_invoices(now=datetime.now(UTC) + timedelta(days=8)) == 1

        invoice = BusinessInvoiceRepository(db_session).get_all(batch_id=batch.id)[0]
        assert invoice.status == BusinessInvoiceStatus.OVERDUE.value


class TestBusinessInvoiceRepository:
    def test_mark_paid_twice_fails(self, db_session, make_reward):
        make_reward()
        batch = BatchScheduler(db_session, MockSwishClient()).process_batch(WEEK)
        repo = BusinessInvoiceRepository(db_session)
        invoice = repo.get_all(batch_id=batch.id)[0]

        paid = repo.mark_paid(invoice.id)
        assert paid.status == BusinessInvoiceStatus.PAID.value
        assert paid.paid_at is not None
        with pytest.raises(ValueError, match="already paid"):
            repo.mark_paid(invoice.id)
        with pytest.raises(ValueError, match="cannot be disputed"):
            repo.mark_disputed(invoice.id)

    def test_dispute_scoped_to_business(self, db_session, make_reward, other_business_id):
        make_reward()
        batch = BatchScheduler(db_session, MockSwishClient()).process_batch(WEEK)
        repo = BusinessInvoiceRepository(db_session)
        invoice = repo.get_all(batch_id=batch.id)[0]

        assert repo.mark_disputed(invoice.id, business_id=other_business_id) is None
        disputed = repo.mark_disputed(invoice.id, business_id=invoice.business_id)
        assert disputed.status == BusinessInvoiceStatus.DISPUTED.value
