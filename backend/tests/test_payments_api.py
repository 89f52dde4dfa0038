"""Tests for the payment batch, transaction, reconciliation and invoice APIs."""

import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from vocilia.main import app
from vocilia.models.payment_batch import PaymentBatchStatus
from vocilia.repositories.payment_transaction_repository import PaymentTransactionRepository
from vocilia.services.batch_scheduler import BatchScheduler
from vocilia.services.payment_client import MockSwishClient

WEEK = "2025-W09"


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def failed_batch(db_session, make_reward):
    """A processed batch with one successful and one failed payout."""
    make_reward(customer_phone="0701111111", transaction_amount_sek="100.00", rating=4)
    make_reward(customer_phone="0702222222", transaction_amount_sek="100.00", rating=1)
    client = MockSwishClient(failing_numbers={"0702222222"})
    return BatchScheduler(db_session, client).process_batch(WEEK)


class TestPaymentBatchesAPI:
    def test_list_empty(self, client: TestClient, admin_headers):
        response = client.get("/v1/payment_batches/", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == []

    def test_process_batch(self, client: TestClient, admin_headers, make_reward):
        make_reward(customer_phone="0701111111", transaction_amount_sek="100.00", rating=4)

        response = client.post(
            "/v1/payment_batches/process", json={"batch_week": WEEK}, headers=admin_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["batch_week"] == WEEK
        assert data["status"] == PaymentBatchStatus.COMPLETED.value
        assert data["total_customers"] == 1
        assert Decimal(data["total_amount_sek"]) == Decimal("5.00")

        response = client.get(f"/v1/payment_batches/{data['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["successful_payments"] == 1

    def test_process_defaults_to_previous_week(self, client: TestClient, admin_headers):
        with patch(
            "vocilia.routers.payment_batches.previous_week_label", return_value="2025-W02"
        ):
            response = client.post("/v1/payment_batches/process", json={}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["batch_week"] == "2025-W02"

    def test_process_completed_week_conflicts(self, client: TestClient, admin_headers):
        body = {"batch_week": WEEK}
        assert client.post("/v1/payment_batches/process", json=body, headers=admin_headers).status_code == 200

        response = client.post("/v1/payment_batches/process", json=body, headers=admin_headers)
        assert response.status_code == 409
        assert "already completed" in response.json()["detail"]

    def test_process_invalid_week(self, client: TestClient, admin_headers):
        response = client.post(
            "/v1/payment_batches/process", json={"batch_week": "2025-W60"}, headers=admin_headers
        )
        assert response.status_code == 422

    def test_process_nonexistent_week(self, client: TestClient, admin_headers):
        response = client.post(
            "/v1/payment_batches/process", json={"batch_week": "2025-W53"}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_get_not_found(self, client: TestClient, admin_headers):
        response = client.get(f"/v1/payment_batches/{uuid.uuid4()}", headers=admin_headers)
        assert response.status_code == 404

    def test_enqueue(self, client: TestClient, admin_headers):
        mock_job = MagicMock()
        mock_job.job_id = "job-42"
        with patch(
            "vocilia.routers.payment_batches.enqueue_payment_batch", new_callable=AsyncMock
        ) as mock_enqueue:
            mock_enqueue.return_value = mock_job
            response = client.post(
                "/v1/payment_batches/enqueue", json={"batch_week": WEEK}, headers=admin_headers
            )

        assert response.status_code == 202
        assert response.json() == {"job_id": "job-42", "batch_week": WEEK}
        mock_enqueue.assert_called_once_with(WEEK)

    def test_filter_by_status(self, client: TestClient, admin_headers, failed_batch):
        response = client.get(
            "/v1/payment_batches/", params={"status": "completed"}, headers=admin_headers
        )
        assert [b["id"] for b in response.json()] == [str(failed_batch.id)]

        response = client.get(
            "/v1/payment_batches/", params={"status": "failed"}, headers=admin_headers
        )
        assert response.json() == []


class TestPaymentTransactionsAPI:
    def test_list_by_batch_and_status(self, client: TestClient, admin_headers, failed_batch):
        response = client.get(
            "/v1/payment_transactions/",
            params={"batch_id": str(failed_batch.id), "status": "failed"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["customer_phone"] == "0702222222"

    def test_list_failures(self, client: TestClient, admin_headers, failed_batch):
        response = client.get("/v1/payment_transactions/failures", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()[0]["swish_error_code"] == "ACMT07"

    def test_retry(self, client: TestClient, admin_headers, db_session, failed_batch):
        failed = PaymentTransactionRepository(db_session).get_all(
            batch_id=failed_batch.id, customer_phone="0702222222"
        )[0]

        response = client.post(
            f"/v1/payment_transactions/{failed.id}/retry", headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["status"] == "successful"
        assert response.json()["retry_count"] == 1

        response = client.post(
            f"/v1/payment_transactions/{failed.id}/retry", headers=admin_headers
        )
        assert response.status_code == 400

    def test_retry_claimed_elsewhere_conflicts(
        self, client: TestClient, admin_headers, db_session, failed_batch
    ):
        failed = PaymentTransactionRepository(db_session).get_all(
            batch_id=failed_batch.id, customer_phone="0702222222"
        )[0]

        with patch.object(PaymentTransactionRepository, "claim_for_retry", return_value=False):
            response = client.post(
                f"/v1/payment_transactions/{failed.id}/retry", headers=admin_headers
            )

        assert response.status_code == 409
        assert "already being retried" in response.json()["detail"]

    def test_retry_not_found(self, client: TestClient, admin_headers):
        response = client.post(
            f"/v1/payment_transactions/{uuid.uuid4()}/retry", headers=admin_headers
        )
        assert response.status_code == 404

    def test_get_transaction(self, client: TestClient, admin_headers, db_session, failed_batch):
        txn = PaymentTransactionRepository(db_session).get_by_batch(failed_batch.id)[0]
        response = client.get(f"/v1/payment_transactions/{txn.id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["batch_id"] == str(failed_batch.id)


class TestReconciliationAPI:
    def test_get_report(self, client: TestClient, admin_headers, failed_batch):
        response = client.get(f"/v1/reconciliation/{failed_batch.id}", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["report_period"] == WEEK
        assert data["payment_failure_count"] == 1
        assert data["discrepancy_count"] == 1

    def test_generate_unknown_batch(self, client: TestClient, admin_headers):
        response = client.post(
            f"/v1/reconciliation/{uuid.uuid4()}/generate", headers=admin_headers
        )
        assert response.status_code == 404

    def test_report_not_found(self, client: TestClient, admin_headers):
        response = client.get(f"/v1/reconciliation/{uuid.uuid4()}", headers=admin_headers)
        assert response.status_code == 404


class TestBusinessInvoicesAPI:
    def test_business_sees_only_own_invoices(
        self, client: TestClient, business_headers, db_session, make_reward, other_business_id
    ):
        make_reward(customer_phone="0701111111")
        make_reward(customer_phone="0702222222", business_id=other_business_id)
        BatchScheduler(db_session, MockSwishClient()).process_batch(WEEK)

        response = client.get(
            "/v1/business_invoices/",
            params={"business_id": str(other_business_id)},
            headers=business_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["business_id"] != str(other_business_id)

    def test_admin_marks_paid_and_business_disputes(
        self, client: TestClient, admin_headers, business_headers, db_session, make_reward
    ):
        make_reward()
        make_reward(customer_phone="0702222222")
        batch = BatchScheduler(db_session, MockSwishClient()).process_batch(WEEK)
        invoice_id = client.get(
            "/v1/business_invoices/", params={"batch_id": str(batch.id)}, headers=admin_headers
        ).json()[0]["id"]

        response = client.post(f"/v1/business_invoices/{invoice_id}/dispute", headers=business_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "disputed"

        response = client.post(f"/v1/business_invoices/{invoice_id}/mark_paid", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "paid"

        response = client.post(f"/v1/business_invoices/{invoice_id}/mark_paid", headers=admin_headers)
        assert response.status_code == 400

    def test_business_cannot_mark_paid(self, client: TestClient, business_headers):
        response = client.post(
            f"/v1/business_invoices/{uuid.uuid4()}/mark_paid", headers=business_headers
        )
        assert response.status_code == 403

    def test_invoice_not_found(self, client: TestClient, admin_headers):
        response = client.get(f"/v1/business_invoices/{uuid.uuid4()}", headers=admin_headers)
        assert response.status_code == 404
