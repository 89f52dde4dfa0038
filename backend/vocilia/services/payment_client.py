"""Payment client abstraction for customer payouts.

The default client is a mock; the HTTP Swish client lives in
``vocilia.services.payment_clients.swish``.
"""

import logging
import re
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from vocilia.core.config import settings

logger = logging.getLogger(__name__)

SWISH_NUMBER_PATTERN = re.compile(r"^(\+46|0)7\d{8}$")

NETWORK_ERROR_CODE = "NETWORK_ERROR"


class SwishPayoutStatus(str, Enum):
    CREATED = "CREATED"
    PROCESSING = "PROCESSING"
    PAID = "PAID"
    ERROR = "ERROR"
    CANCELLED = "CANCELLED"


@dataclass
class SwishPayoutResult:
    """Outcome of a payout request."""

    status: SwishPayoutStatus
    swish_transaction_id: str | None = None
    error_code: str | None = None
    error_message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == SwishPayoutStatus.PAID

    @property
    def pending(self) -> bool:
        """Swish accepted the payout but has not paid it yet."""
        return self.status in (SwishPayoutStatus.CREATED, SwishPayoutStatus.PROCESSING)

    @property
    def transient(self) -> bool:
        """Swish could not be reached, so the payout state is unknown."""
        code = self.error_code or ""
        return code == NETWORK_ERROR_CODE or code.startswith("HTTP_5")


def normalize_phone(phone: str) -> str:
    """Strip whitespace and dashes from a phone number."""
    return re.sub(r"[\s-]", "", phone)


def is_valid_swish_number(phone: str) -> bool:
    """Swedish mobile number in +467XXXXXXXX or 07XXXXXXXX form."""
    return bool(SWISH_NUMBER_PATTERN.match(normalize_phone(phone)))


def to_swish_alias(phone: str) -> str:
    """Convert a Swedish mobile number to the Swish alias format (46XXXXXXXXX)."""
    number = normalize_phone(phone)
    if number.startswith("+46"):
        return number[1:]
    if number.startswith("0"):
        return "46" + number[1:]
    return number


def generate_payment_reference() -> str:
    """Swish instruction UUID: 32 upper-case hex characters."""
    return uuid.uuid4().hex.upper()


class SwishClientBase(ABC):
    """Abstract base class for payout clients."""

    @abstractmethod
    def create_payout(
        self,
        reference: str,
        phone: str,
        amount: Decimal,
        message: str,
    ) -> SwishPayoutResult:
        """Send ``amount`` SEK to ``phone``."""
        pass  # pragma: no cover

    @abstractmethod
    def get_payout_status(self, reference: str) -> SwishPayoutResult:
        """Look up the current state of a payout."""
        pass  # pragma: no cover


class MockSwishClient(SwishClientBase):
    """In-process client that pays instantly.

    Numbers in ``failing_numbers`` are rejected with ``error_code``. Payouts to
    ``pending_numbers`` are accepted but stay ``CREATED`` until
    :meth:`complete_payout` is called.
    """

    def __init__(
        self,
        failing_numbers: set[str] | None = None,
        error_code: str = "ACMT07",
        error_message: str = "Payee is not Swish enrolled",
        pending_numbers: set[str] | None = None,
    ):
        self.failing_numbers = {normalize_phone(n) for n in failing_numbers or set()}
        self.pending_numbers = {normalize_phone(n) for n in pending_numbers or set()}
        self.error_code = error_code
        self.error_message = error_message
        self.payouts: dict[str, SwishPayoutResult] = {}

    def create_payout(
        self,
        reference: str,
        phone: str,
        amount: Decimal,
        message: str,
    ) -> SwishPayoutResult:
        logger.info("Mock Swish payout %s: %s SEK to %s", reference, amount, phone)
        number = normalize_phone(phone)
        if number in self.failing_numbers:
            result = SwishPayoutResult(
                status=SwishPayoutStatus.ERROR,
                error_code=self.error_code,
                error_message=self.error_message,
            )
        elif number in self.pending_numbers:
            result = SwishPayoutResult(status=SwishPayoutStatus.CREATED)
        else:
            result = SwishPayoutResult(
                status=SwishPayoutStatus.PAID,
                swish_transaction_id=f"MOCK{reference[:16]}",
            )
        self.payouts[reference] = result
        return result

    def complete_payout(self, reference: str) -> None:
        self.payouts[reference] = SwishPayoutResult(
            status=SwishPayoutStatus.PAID,
            swish_transaction_id=f"MOCK{reference[:16]}",
        )

    def get_payout_status(self, reference: str) -> SwishPayoutResult:
        result = self.payouts.get(reference)
        if result is None:
            return SwishPayoutResult(
                status=SwishPayoutStatus.ERROR,
                error_code="RP01",
                error_message="Payout not found",
            )
        return result


def get_swish_client() -> SwishClientBase:
    """Return the payout client for the configured Swish environment."""
    if settings.swish_mocked:
        return MockSwishClient()

    from vocilia.services.payment_clients.swish import SwishClient

    return SwishClient()
