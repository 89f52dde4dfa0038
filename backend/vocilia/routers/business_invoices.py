"""Business invoice API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from vocilia.core.auth import Principal, Role, get_current_principal, require_admin
from vocilia.core.database import get_db
from vocilia.models.business_invoice import BusinessInvoice, BusinessInvoiceStatus
from vocilia.repositories.business_invoice_repository import BusinessInvoiceRepository
from vocilia.schemas.business_invoice import BusinessInvoiceResponse

router = APIRouter()


def _scope(principal: Principal) -> UUID | None:
    """Business callers are confined to their own invoices."""
    return principal.business_id if principal.role == Role.BUSINESS else None


@router.get("/", response_model=list[BusinessInvoiceResponse])
async def list_business_invoices(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    business_id: UUID | None = None,
    batch_id: UUID | None = None,
    status: BusinessInvoiceStatus | None = None,
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> list[BusinessInvoice]:
    repo = BusinessInvoiceRepository(db)
    return repo.get_all(
        skip=skip,
        limit=limit,
        business_id=_scope(principal) or business_id,
        batch_id=batch_id,
        status=status,
        order_by=order_by,
    )


@router.get("/{invoice_id}", response_model=BusinessInvoiceResponse)
async def get_business_invoice(
    invoice_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> BusinessInvoice:
    repo = BusinessInvoiceRepository(db)
    invoice = repo.get_by_id(invoice_id, business_id=_scope(principal))
    if not invoice:
        raise HTTPException(status_code=404, detail="Business invoice not found")
    return invoice


@router.post("/{invoice_id}/mark_paid", response_model=BusinessInvoiceResponse)
async def mark_business_invoice_paid(
    invoice_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> BusinessInvoice:
    repo = BusinessInvoiceRepository(db)
    try:
        invoice = repo.mark_paid(invoice_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    if not invoice:
        raise HTTPException(status_code=404, detail="Business invoice not found")
    return invoice


@router.post("/{invoice_id}/dispute", response_model=BusinessInvoiceResponse)
async def dispute_business_invoice(
    invoice_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> BusinessInvoice:
    repo = BusinessInvoiceRepository(db)
    try:
        invoice = repo.mark_disputed(invoice_id, business_id=_scope(principal))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    if not invoice:
        raise HTTPException(status_code=404, detail="Business invoice not found")
    return invoice
