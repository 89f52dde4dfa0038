from vocilia.schemas.business_invoice import BusinessInvoiceResponse
from vocilia.schemas.payment_batch import (
    PaymentBatchEnqueueResponse,
    PaymentBatchProcessRequest,
    PaymentBatchResponse,
)
from vocilia.schemas.payment_transaction import PaymentFailureResponse, PaymentTransactionResponse
from vocilia.schemas.reconciliation_report import ReconciliationReportResponse
from vocilia.schemas.reward_calculation import (
    CustomerRewardSummary,
    RewardCalculationCreate,
    RewardCalculationResponse,
    RewardVerifyRequest,
    RewardVerifyResponse,
)

__all__ = [
    "BusinessInvoiceResponse",
    "CustomerRewardSummary",
    "PaymentBatchEnqueueResponse",
    "PaymentBatchProcessRequest",
    "PaymentBatchResponse",
    "PaymentFailureResponse",
    "PaymentTransactionResponse",
    "ReconciliationReportResponse",
    "RewardCalculationCreate",
    "RewardCalculationResponse",
    "RewardVerifyRequest",
    "RewardVerifyResponse",
]
