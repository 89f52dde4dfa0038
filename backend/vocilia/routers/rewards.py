"""Reward calculation API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from vocilia.core.auth import Principal, Role, get_current_principal, require_admin, require_business
from vocilia.core.database import get_db
from vocilia.models.reward_calculation import RewardCalculation
from vocilia.repositories.reward_calculation_repository import RewardCalculationRepository
from vocilia.schemas.reward_calculation import (
    CustomerRewardSummary,
    RewardCalculationCreate,
    RewardCalculationResponse,
    RewardVerifyRequest,
    RewardVerifyResponse,
)
from vocilia.services.reward_calculator import RewardCalculatorService

router = APIRouter()


@router.post("/", response_model=RewardCalculationResponse, status_code=201)
async def create_reward(
    data: RewardCalculationCreate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> RewardCalculation:
    """Calculate and store the reward for a scored feedback call."""
    service = RewardCalculatorService(db)
    try:
        return service.create_reward_for_feedback(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None


@router.get("/", response_model=list[RewardCalculationResponse])
async def list_rewards(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    business_id: UUID | None = None,
    store_id: UUID | None = None,
    customer_phone: str | None = None,
    verified: bool | None = None,
    paid: bool | None = None,
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> list[RewardCalculation]:
    """List rewards. Business callers only ever see their own."""
    if principal.role == Role.BUSINESS:
        business_id = principal.business_id
    repo = RewardCalculationRepository(db)
    return repo.get_all(
        skip=skip,
        limit=limit,
        business_id=business_id,
        store_id=store_id,
        customer_phone=customer_phone,
        verified=verified,
        paid=paid,
        order_by=order_by,
    )


@router.get("/pending_summary", response_model=list[CustomerRewardSummary])
async def pending_reward_summary(
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> list[CustomerRewardSummary]:
    """Verified, unpaid rewards summed per customer."""
    service = RewardCalculatorService(db)
    return [
        CustomerRewardSummary(
            customer_phone=row.customer_phone,
            total_amount_sek=row.total_amount_sek,
            reward_count=row.reward_count,
        )
        for row in service.summarize_pending_rewards()
    ]


@router.post("/verify", response_model=RewardVerifyResponse)
async def verify_rewards(
    data: RewardVerifyRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_business),
) -> RewardVerifyResponse:
    """Business confirms the purchases behind its rewards."""
    service = RewardCalculatorService(db)
    count = service.verify_rewards(principal.business_id, data.reward_ids)  # type: ignore[arg-type]
    return RewardVerifyResponse(verified_count=count)
