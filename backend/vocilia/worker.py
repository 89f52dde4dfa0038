import logging
from typing import Any
from zoneinfo import ZoneInfo

from arq import cron

from vocilia.core.config import settings
from vocilia.core.database import SessionLocal
from vocilia.services.batch_scheduler import BatchScheduler
from vocilia.services.batch_weeks import previous_week_label
from vocilia.services.business_invoice_service import BusinessInvoiceService
from vocilia.services.payment_processor import PaymentProcessor
from vocilia.tasks import redis_settings

logger = logging.getLogger(__name__)


async def process_weekly_payment_batch_task(
    ctx: dict[str, Any], batch_week: str | None = None
) -> dict[str, Any] | None:
    """Background task: pay out the previous ISO week's verified rewards.

    Runs weekly from cron, or on demand with an explicit ``batch_week``.
    Errors are logged and swallowed; the next scheduled run picks up whatever
    is still unpaid.
    """
    week = batch_week or previous_week_label()
    db = SessionLocal()
    try:
        batch = BatchScheduler(db).process_batch(week)
        return {
            "batch_id": str(batch.id),
            "batch_week": batch.batch_week,
            "status": batch.status,
            "successful_payments": batch.successful_payments,
            "failed_payments": batch.failed_payments,
            "total_amount_sek": str(batch.total_amount_sek),
        }
    except Exception:
        logger.exception("Weekly payment batch %s did not complete", week)
        return None
    finally:
        db.close()


async def mark_overdue_invoices_task(ctx: dict[str, Any]) -> int:
    """Background task: flag business invoices past their due date.

    Runs daily.
    """
    db = SessionLocal()
    try:
        return BusinessInvoiceService(db).mark_overdue_invoices()
    finally:
        db.close()


async def settle_in_flight_payouts_task(ctx: dict[str, Any]) -> int:
    """Background task: settle payouts Swish accepted but had not paid yet.

    Also picks up payouts left pending by a batch run that stopped midway.
    """
    db = SessionLocal()
    try:
        return PaymentProcessor(db).settle_in_flight_payouts()
    finally:
        db.close()


class WorkerSettings:
    functions = [
        process_weekly_payment_batch_task,
        mark_overdue_invoices_task,
        settle_in_flight_payouts_task,
    ]
    cron_jobs = [
        cron(
            process_weekly_payment_batch_task,
            weekday=settings.BATCH_CRON_WEEKDAY,
            hour=settings.BATCH_CRON_HOUR,
            minute=0,
            unique=True,
        ),
        cron(mark_overdue_invoices_task, hour=6, minute=0),  # daily
        cron(
            settle_in_flight_payouts_task,
            minute=set(range(0, 60, settings.PAYOUT_SETTLE_INTERVAL_MINUTES)),
            unique=True,
        ),
    ]
    redis_settings = redis_settings
    timezone = ZoneInfo(settings.BATCH_TIMEZONE)
