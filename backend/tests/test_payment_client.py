"""Tests for the Swish payout clients."""

import json
from decimal import Decimal
import httpx
import pytest

from vocilia.services.payment_client import (
    MockSwishClient,
    SwishPayoutStatus,
    generate_payment_reference,
    get_swish_client,
    is_valid_swish_number,
    normalize_phone,
    to_swish_alias,
)
from vocilia.services.payment_clients.swish import SwishClient

REFERENCE = "0123456789ABCDEF0123456789ABCDEF"


class TestPhoneNumbers:
    @pytest.mark.parametrize("phone", ["0701234567", "+46701234567", "070-123 45 67"])
    def test_valid(self, phone):
        assert is_valid_swish_number(phone)

    @pytest.mark.parametrize("phone", ["0812345678", "070123456", "+4570123456", "46701234567"])
    def test_invalid(self, phone):
        assert not is_valid_swish_number(phone)

    def test_normalize(self):
        assert normalize_phone(" 070-123 45 67 ") == "0701234567"

    def test_alias(self):
        assert to_swish_alias("0701234567") == "46701234567"
        assert to_swish_alias("+46701234567") == "46701234567"

    def test_reference_format(self):
        reference = generate_payment_reference()
        assert len(reference) == 32
        assert reference == reference.upper()


class TestMockSwishClient:
    def test_pays_and_remembers(self):
        client = MockSwishClient()
        result = client.create_payout(REFERENCE, "0701234567", Decimal("10.00"), "hi")

        assert result.succeeded
        assert result.swish_transaction_id == "MOCK0123456789ABCDEF"
        assert client.get_payout_status(REFERENCE) is result

    def test_failing_number(self):
        client = MockSwishClient(failing_numbers={"070-111 11 11"})
        result = client.create_payout(REFERENCE, "0701111111", Decimal("10.00"), "hi")

        assert not result.succeeded
        assert result.error_code == "ACMT07"

    def test_pending_number_until_completed(self):
        client = MockSwishClient(pending_numbers={"0701234567"})
        result = client.create_payout(REFERENCE, "0701234567", Decimal("10.00"), "hi")

        assert result.pending
        client.complete_payout(REFERENCE)
        assert client.get_payout_status(REFERENCE).succeeded

    def test_unknown_reference(self):
        result = MockSwishClient().get_payout_status("nope")
        assert result.status == SwishPayoutStatus.ERROR

    def test_factory_returns_mock_by_default(self):
        assert isinstance(get_swish_client(), MockSwishClient)


def _swish_client(monkeypatch, handler) -> SwishClient:
    """SwishClient whose HTTP calls are served by ``handler``."""
    transport = httpx.MockTransport(handler)
    monkeypatch.setattr(
        SwishClient,
        "_client",
        lambda self: httpx.Client(base_url=self.api_url, transport=transport),
    )
    return SwishClient(
        api_url="https://swish.test/api/v1",
        merchant_alias="1231181189",
        cert_path="",
    )


class TestSwishClient:
    def test_create_payout_success(self, monkeypatch):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "PUT":
                seen["payload"] = json.loads(request.content)
                seen["path"] = request.url.path
                return httpx.Response(201)
            return httpx.Response(200, json={"status": "PAID", "paymentReference": "SWISH123"})

        result = _swish_client(monkeypatch, handler).create_payout(
            REFERENCE, "0701234567", Decimal("12.5"), "Vocilia cashback"
        )

        assert result.succeeded
        assert result.swish_transaction_id == "SWISH123"
        assert seen["path"] == f"/api/v1/payouts/{REFERENCE}"
        assert seen["payload"]["payeeAlias"] == "46701234567"
        assert seen["payload"]["payerAlias"] == "1231181189"
        assert seen["payload"]["amount"] == "12.50"
        assert seen["payload"]["currency"] == "SEK"

    def test_create_payout_rejected(self, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                422, json=[{"errorCode": "ACMT07", "errorMessage": "Payee not enrolled"}]
            )

        result = _swish_client(monkeypatch, handler).create_payout(
            REFERENCE, "0701234567", Decimal("10"), "x"
        )

        assert result.status == SwishPayoutStatus.ERROR
        assert result.error_code == "ACMT07"
        assert result.error_message == "Payee not enrolled"

    def test_non_json_error(self, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="upstream down")

        result = _swish_client(monkeypatch, handler).create_payout(
            REFERENCE, "0701234567", Decimal("10"), "x"
        )

        assert result.error_code == "HTTP_500"
        assert result.error_message == "upstream down"

    def test_network_error(self, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = _swish_client(monkeypatch, handler).create_payout(
            REFERENCE, "0701234567", Decimal("10"), "x"
        )

        assert result.error_code == "NETWORK_ERROR"
        assert "connection refused" in result.error_message

    def test_unknown_status_is_error(self, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"status": "WEIRD"})

        result = _swish_client(monkeypatch, handler).get_payout_status(REFERENCE)
        assert result.status == SwishPayoutStatus.ERROR

    def test_accepted_payout_with_failed_lookup_is_pending(self, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "PUT":
                return httpx.Response(201)
            raise httpx.ReadTimeout("timed out", request=request)

        result = _swish_client(monkeypatch, handler).create_payout(
            REFERENCE, "0701234567", Decimal("10"), "x"
        )

        assert result.pending
        assert not result.succeeded

    def test_accepted_payout_not_yet_paid_is_pending(self, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "PUT":
                return httpx.Response(201)
            return httpx.Response(200, json={"status": "CREATED"})

        result = _swish_client(monkeypatch, handler).create_payout(
            REFERENCE, "0701234567", Decimal("10"), "x"
        )

        assert result.status == SwishPayoutStatus.CREATED
        assert result.pending

    def test_status_lookup_network_error_is_transient(self, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = _swish_client(monkeypatch, handler).get_payout_status(REFERENCE)
        assert result.transient

    def test_missing_payout_is_not_transient(self, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        result = _swish_client(monkeypatch, handler).get_payout_status(REFERENCE)
        assert result.status == SwishPayoutStatus.ERROR
        assert not result.transient
