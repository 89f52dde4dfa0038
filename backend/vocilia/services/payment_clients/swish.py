"""Swish payout API client.

Swish authenticates merchants with a TLS client certificate. A payout is
created with ``PUT /payouts/{instructionUUID}`` and its state is read back
with ``GET /payouts/{instructionUUID}``.
"""

import logging
import ssl
from decimal import Decimal
from typing import Any

import httpx

from vocilia.core.config import settings
from vocilia.services.payment_client import (
    NETWORK_ERROR_CODE,
    SwishClientBase,
    SwishPayoutResult,
    SwishPayoutStatus,
    to_swish_alias,
)

logger = logging.getLogger(__name__)


class SwishClient(SwishClientBase):
    """HTTP client for the Swish payout API."""

    def __init__(
        self,
        api_url: str | None = None,
        merchant_alias: str | None = None,
        cert_path: str | None = None,
        key_path: str | None = None,
        timeout: float | None = None,
    ):
        self.api_url = (api_url or settings.swish_api_url).rstrip("/")
        self.merchant_alias = merchant_alias or settings.swish_merchant_alias
        self.cert_path = cert_path or settings.swish_cert_path
        self.key_path = key_path or settings.swish_key_path
        self.timeout = timeout or settings.SWISH_TIMEOUT_SECONDS

    def _client(self) -> httpx.Client:
        verify: ssl.SSLContext | bool = True
        if self.cert_path:
            context = ssl.create_default_context()
            context.load_cert_chain(self.cert_path, self.key_path or None)
            verify = context
        return httpx.Client(base_url=self.api_url, verify=verify, timeout=self.timeout)

    def create_payout(
        self,
        reference: str,
        phone: str,
        amount: Decimal,
        message: str,
    ) -> SwishPayoutResult:
        payload: dict[str, Any] = {
            "payerPaymentReference": reference,
            "payerAlias": self.merchant_alias,
            "payeeAlias": to_swish_alias(phone),
            "amount": f"{amount:.2f}",
            "currency": "SEK",
            "payoutType": "PAYOUT",
            "message": message[:50],
        }
        try:
            with self._client() as client:
                resp = client.put(f"/payouts/{reference}", json=payload)
                if resp.status_code not in (200, 201):
                    return self._error_result(resp)
                try:
                    status_resp = client.get(f"/payouts/{reference}")
                except httpx.HTTPError as exc:
                    logger.warning(
                        "Swish accepted payout %s but its status lookup failed: %s", reference, exc
                    )
                    return SwishPayoutResult(status=SwishPayoutStatus.CREATED)
        except httpx.HTTPError as exc:
            logger.warning("Swish payout request %s failed: %s", reference, exc)
            return SwishPayoutResult(
                status=SwishPayoutStatus.ERROR,
                error_code=NETWORK_ERROR_CODE,
                error_message=str(exc)[:500],
            )

        # Accepted payouts are only failed on a status Swish reports for them
        if status_resp.status_code != 200:
            logger.warning(
                "Swish accepted payout %s but its status lookup returned %d",
                reference,
                status_resp.status_code,
            )
            return SwishPayoutResult(status=SwishPayoutStatus.CREATED)
        return self._status_result(status_resp.json())

    def get_payout_status(self, reference: str) -> SwishPayoutResult:
        try:
            with self._client() as client:
                resp = client.get(f"/payouts/{reference}")
        except httpx.HTTPError as exc:
            logger.warning("Swish status lookup %s failed: %s", reference, exc)
            return SwishPayoutResult(
                status=SwishPayoutStatus.ERROR,
                error_code=NETWORK_ERROR_CODE,
                error_message=str(exc)[:500],
            )

        if resp.status_code != 200:
            return self._error_result(resp)
        return self._status_result(resp.json())

    @staticmethod
    def _status_result(body: dict[str, Any]) -> SwishPayoutResult:
        try:
            status = SwishPayoutStatus(body.get("status", "ERROR"))
        except ValueError:
            status = SwishPayoutStatus.ERROR
        return SwishPayoutResult(
            status=status,
            swish_transaction_id=body.get("paymentReference"),
            error_code=body.get("errorCode"),
            error_message=body.get("errorMessage"),
        )

    @staticmethod
    def _error_result(resp: httpx.Response) -> SwishPayoutResult:
        """Swish returns a list of {errorCode, errorMessage} objects on 4xx."""
        error_code = f"HTTP_{resp.status_code}"
        error_message = resp.text[:500] if resp.text else "Swish request rejected"
        try:
            errors = resp.json()
        except ValueError:
            errors = None
        if isinstance(errors, list) and errors:
            error_code = errors[0].get("errorCode") or error_code
            error_message = errors[0].get("errorMessage") or error_message
        return SwishPayoutResult(
            status=SwishPayoutStatus.ERROR,
            error_code=error_code,
            error_message=error_message,
        )
