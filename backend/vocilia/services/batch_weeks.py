"""ISO week labels for weekly payout batches ("2025-W09")."""

import re
from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

from vocilia.core.config import settings

_WEEK_LABEL_RE = re.compile(r"^(\d{4})-W(\d{2})$")


def iso_week_label(day: date) -> str:
    """Return the ISO year-week label containing ``day``."""
    iso_year, iso_week, _ = day.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def parse_week_label(label: str) -> tuple[int, int]:
    """Split a week label into (iso_year, iso_week), validating the week exists."""
    match = _WEEK_LABEL_RE.match(label)
    if not match:
        raise ValueError(f"Invalid batch week label: {label!r}")
    year, week = int(match.group(1)), int(match.group(2))
    try:
        date.fromisocalendar(year, week, 1)
    except ValueError:
        raise ValueError(f"Week {week} does not exist in ISO year {year}") from None
    return year, week


def week_bounds(label: str) -> tuple[date, date]:
    """Monday and Sunday of the ISO week named by ``label``."""
    year, week = parse_week_label(label)
    monday = date.fromisocalendar(year, week, 1)
    return monday, monday + timedelta(days=6)


def previous_week_label(now: datetime | None = None, tz_name: str | None = None) -> str:
    """Label of the ISO week before the one containing ``now`` in the batch timezone."""
    tz = ZoneInfo(tz_name or settings.BATCH_TIMEZONE)
    current = (now or datetime.now(UTC)).astimezone(tz)
    return iso_week_label(current.date() - timedelta(weeks=1))
