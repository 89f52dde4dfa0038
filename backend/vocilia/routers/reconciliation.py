"""Reconciliation report API endpoints (admin only)."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from vocilia.core.auth import Principal, require_admin
from vocilia.core.database import get_db
from vocilia.models.reconciliation_report import ReconciliationReport
from vocilia.repositories.payment_batch_repository import PaymentBatchRepository
from vocilia.repositories.reconciliation_report_repository import ReconciliationReportRepository
from vocilia.schemas.reconciliation_report import ReconciliationReportResponse
from vocilia.services.reconciliation_service import ReconciliationService

router = APIRouter()


@router.get("/{batch_id}", response_model=ReconciliationReportResponse)
async def get_reconciliation_report(
    batch_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> ReconciliationReport:
    repo = ReconciliationReportRepository(db)
    report = repo.get_by_batch_id(batch_id)
    if not report:
        raise HTTPException(status_code=404, detail="Reconciliation report not found")
    return report


@router.post("/{batch_id}/generate", response_model=ReconciliationReportResponse)
async def generate_reconciliation_report(
    batch_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> ReconciliationReport:
    """Rebuild the report for a batch, e.g. after retrying failed payouts."""
    if not PaymentBatchRepository(db).get_by_id(batch_id):
        raise HTTPException(status_code=404, detail="Payment batch not found")
    return ReconciliationService(db).generate_report(batch_id)
