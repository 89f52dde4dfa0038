from vocilia.repositories.business_invoice_repository import BusinessInvoiceRepository
from vocilia.repositories.payment_batch_repository import PaymentBatchRepository
from vocilia.repositories.payment_failure_repository import PaymentFailureRepository
from vocilia.repositories.payment_transaction_repository import PaymentTransactionRepository
from vocilia.repositories.reconciliation_report_repository import ReconciliationReportRepository
from vocilia.repositories.reward_calculation_repository import RewardCalculationRepository

__all__ = [
    "BusinessInvoiceRepository",
    "PaymentBatchRepository",
    "PaymentFailureRepository",
    "PaymentTransactionRepository",
    "ReconciliationReportRepository",
    "RewardCalculationRepository",
]
