"""Payment transaction API endpoints (admin only)."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from vocilia.core.auth import Principal, require_admin
from vocilia.core.database import get_db
from vocilia.models.payment_failure import FailureResolutionStatus, PaymentFailure
from vocilia.models.payment_transaction import PaymentTransaction, PaymentTransactionStatus
from vocilia.repositories.payment_failure_repository import PaymentFailureRepository
from vocilia.repositories.payment_transaction_repository import PaymentTransactionRepository
from vocilia.schemas.payment_transaction import PaymentFailureResponse, PaymentTransactionResponse
from vocilia.services.payment_processor import PaymentProcessor, RetryInProgressError

router = APIRouter()


@router.get("/", response_model=list[PaymentTransactionResponse])
async def list_payment_transactions(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    batch_id: UUID | None = None,
    status: PaymentTransactionStatus | None = None,
    customer_phone: str | None = None,
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> list[PaymentTransaction]:
    """List payment transactions with optional filters."""
    repo = PaymentTransactionRepository(db)
    return repo.get_all(
        skip=skip,
        limit=limit,
        batch_id=batch_id,
        status=status,
        customer_phone=customer_phone,
        order_by=order_by,
    )


@router.get("/failures", response_model=list[PaymentFailureResponse])
async def list_payment_failures(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    resolution_status: FailureResolutionStatus | None = None,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> list[PaymentFailure]:
    repo = PaymentFailureRepository(db)
    return repo.get_all(skip=skip, limit=limit, resolution_status=resolution_status)


@router.get("/{transaction_id}", response_model=PaymentTransactionResponse)
async def get_payment_transaction(
    transaction_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> PaymentTransaction:
    repo = PaymentTransactionRepository(db)
    transaction = repo.get_by_id(transaction_id)
    if not transaction:
        raise HTTPException(status_code=404, detail="Payment transaction not found")
    return transaction


@router.post(
    "/{transaction_id}/retry",
    response_model=PaymentTransactionResponse,
    responses={
        400: {"description": "Transaction is not failed or has no retries left"},
        404: {"description": "Payment transaction not found"},
        409: {"description": "Transaction is already being retried"},
    },
)
async def retry_payment_transaction(
    transaction_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> PaymentTransaction:
    """Re-send a failed payout."""
    repo = PaymentTransactionRepository(db)
    if not repo.get_by_id(transaction_id):
        raise HTTPException(status_code=404, detail="Payment transaction not found")

    processor = PaymentProcessor(db)
    try:
        return processor.retry_failed_transaction(transaction_id)
    except RetryInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
