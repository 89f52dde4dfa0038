"""Payment batch API endpoints (admin only)."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from vocilia.core.auth import Principal, require_admin
from vocilia.core.database import get_db
from vocilia.models.payment_batch import PaymentBatch, PaymentBatchStatus
from vocilia.repositories.payment_batch_repository import PaymentBatchRepository
from vocilia.schemas.payment_batch import (
    PaymentBatchEnqueueResponse,
    PaymentBatchProcessRequest,
    PaymentBatchResponse,
)
from vocilia.services.batch_scheduler import (
    BatchAlreadyProcessedError,
    BatchInProgressError,
    BatchScheduler,
)
from vocilia.services.batch_weeks import previous_week_label
from vocilia.tasks import enqueue_payment_batch

router = APIRouter()


@router.get("/", response_model=list[PaymentBatchResponse])
async def list_payment_batches(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    status: PaymentBatchStatus | None = None,
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> list[PaymentBatch]:
    """List payment batches, newest first by default."""
    repo = PaymentBatchRepository(db)
    return repo.get_all(skip=skip, limit=limit, status=status, order_by=order_by)


@router.get("/{batch_id}", response_model=PaymentBatchResponse)
async def get_payment_batch(
    batch_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> PaymentBatch:
    repo = PaymentBatchRepository(db)
    batch = repo.get_by_id(batch_id)
    if not batch:
        raise HTTPException(status_code=404, detail="Payment batch not found")
    return batch


@router.post(
    "/process",
    response_model=PaymentBatchResponse,
    responses={
        400: {"description": "Invalid batch week"},
        409: {"description": "Batch already completed, processing or settling"},
    },
)
async def process_payment_batch(
    data: PaymentBatchProcessRequest,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> PaymentBatch:
    """Run the payout batch synchronously. Defaults to the previous ISO week."""
    week = data.batch_week or previous_week_label()
    scheduler = BatchScheduler(db)
    try:
        return scheduler.process_batch(week)
    except (BatchAlreadyProcessedError, BatchInProgressError) as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None


@router.post("/enqueue", response_model=PaymentBatchEnqueueResponse, status_code=202)
async def enqueue_payment_batch_run(
    data: PaymentBatchProcessRequest,
    _: Principal = Depends(require_admin),
) -> PaymentBatchEnqueueResponse:
    """Hand a batch run to the background worker."""
    week = data.batch_week or previous_week_label()
    job = await enqueue_payment_batch(week)
    return PaymentBatchEnqueueResponse(job_id=job.job_id, batch_week=week)
