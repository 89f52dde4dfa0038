from vocilia.models.business_invoice import BusinessInvoice, BusinessInvoiceStatus
from vocilia.models.payment_batch import PaymentBatch, PaymentBatchStatus
from vocilia.models.payment_failure import FailureResolutionStatus, PaymentFailure
from vocilia.models.payment_transaction import PaymentTransaction, PaymentTransactionStatus
from vocilia.models.reconciliation_report import ReconciliationReport
from vocilia.models.reward_calculation import RewardCalculation

__all__ = [
    "BusinessInvoice",
    "BusinessInvoiceStatus",
    "FailureResolutionStatus",
    "PaymentBatch",
    "PaymentBatchStatus",
    "PaymentFailure",
    "PaymentTransaction",
    "PaymentTransactionStatus",
    "ReconciliationReport",
    "RewardCalculation",
]
