"""Cashback reward calculation for verified feedback."""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from vocilia.models.reward_calculation import RewardCalculation
from vocilia.models.shared import to_sek
from vocilia.repositories.reward_calculation_repository import (
    CustomerRewardAggregate,
    RewardCalculationRepository,
)
from vocilia.schemas.reward_calculation import RewardCalculationCreate
from vocilia.services.payment_client import is_valid_swish_number, normalize_phone

logger = logging.getLogger(__name__)

BASE_PERCENTAGE = Decimal("2")
MAX_PERCENTAGE = Decimal("15")
DETAIL_BONUS = Decimal("3")


def _rating_bonus(rating: int) -> Decimal:
    if rating >= 4:
        return Decimal("3")
    if rating >= 3:
        return Decimal("1")
    return Decimal("0")


def _sentiment_bonus(sentiment_score: Decimal) -> Decimal:
    if sentiment_score > Decimal("0.7"):
        return Decimal("7")
    if sentiment_score > Decimal("0.3"):
        return Decimal("3")
    return Decimal("0")


def calculate_reward_percentage(
    rating: int,
    has_detailed_feedback: bool,
    sentiment_score: Decimal | float,
) -> Decimal:
    """Cashback percentage for one piece of feedback.

    2% base, plus up to 3 for the rating, 3 for detailed free text and up to 7
    for sentiment, capped at 15%.
    """
    sentiment = Decimal(str(sentiment_score))
    percentage = (
        BASE_PERCENTAGE
        + _rating_bonus(rating)
        + (DETAIL_BONUS if has_detailed_feedback else Decimal("0"))
        + _sentiment_bonus(sentiment)
    )
    return min(percentage, MAX_PERCENTAGE)


def calculate_reward_amount(transaction_amount_sek: Decimal, percentage: Decimal) -> Decimal:
    """SEK reward for a purchase, rounded half-up to öre."""
    return to_sek(Decimal(str(transaction_amount_sek)) * percentage / Decimal("100"))


class RewardCalculatorService:
    """Creates, verifies and summarizes reward calculations."""

    def __init__(self, db: Session):
        self.db = db
        self.reward_repo = RewardCalculationRepository(db)

    def create_reward_for_feedback(self, data: RewardCalculationCreate) -> RewardCalculation:
        """Score a piece of feedback and persist its pending reward."""
        if not is_valid_swish_number(data.customer_phone):
            raise ValueError(f"Invalid Swish phone number: {data.customer_phone}")
        if self.reward_repo.get_by_feedback_id(data.feedback_id):
            raise ValueError(f"Reward already calculated for feedback {data.feedback_id}")

        data = data.model_copy(update={"customer_phone": normalize_phone(data.customer_phone)})
        percentage = calculate_reward_percentage(
            data.rating, data.has_detailed_feedback, data.sentiment_score
        )
        amount = calculate_reward_amount(data.transaction_amount_sek, percentage)
        reward = self.reward_repo.create(data, reward_percentage=percentage, reward_amount_sek=amount)
        logger.info(
            "Reward %s for feedback %s: %s%% = %s SEK",
            reward.id,
            data.feedback_id,
            percentage,
            amount,
        )
        return reward

    def verify_rewards(self, business_id: UUID, reward_ids: list[UUID]) -> int:
        """Business confirms the purchases behind its rewards; returns rows verified."""
        count = self.reward_repo.verify(business_id, reward_ids)
        if count < len(set(reward_ids)):
            logger.warning(
                "Business %s verified %d of %d rewards; the rest were unknown, "
                "foreign, already verified or already paid",
                business_id,
                count,
                len(set(reward_ids)),
            )
        return count

    def summarize_pending_rewards(self) -> list[CustomerRewardAggregate]:
        """Verified, unpaid rewards summed per customer phone."""
        return self.reward_repo.aggregate_pending_by_customer()
