"""Tests for ISO week labels."""

from datetime import UTC, date, datetime

import pytest

from vocilia.services.batch_weeks import (
    iso_week_label,
    parse_week_label,
    previous_week_label,
    week_bounds,
)


def test_iso_week_label_pads_week():
    assert iso_week_label(date(2025, 2, 27)) == "2025-W09"


def test_iso_week_label_uses_iso_year():
    # 2024-12-30 is the Monday of ISO week 1 of 2025
    assert iso_week_label(date(2024, 12, 30)) == "2025-W01"
    assert iso_week_label(date(2021, 1, 3)) == "2020-W53"


def test_week_bounds():
    assert week_bounds("2025-W01") == (date(2024, 12, 30), date(2025, 1, 5))


@pytest.mark.parametrize("label", ["2025-9", "2025-W9", "25-W09", "2025-W00", "2025-W54", ""])
def test_parse_week_label_rejects_bad_labels(label):
    with pytest.raises(ValueError):
        parse_week_label(label)


def test_parse_week_label_rejects_missing_week_53():
    with pytest.raises(ValueError, match="does not exist"):
        parse_week_label("2025-W53")


def test_previous_week_on_stockholm_monday_morning():
    # Monday 2025-01-06 00:30 in Stockholm
    now = datetime(2025, 1, 5, 23, 30, tzinfo=UTC)
    assert previous_week_label(now) == "2025-W01"


def test_previous_week_uses_batch_timezone():
    # Sunday 23:30 UTC is already Monday 00:30 in Stockholm
    now = datetime(2025, 1, 12, 23, 30, tzinfo=UTC)
    assert previous_week_label(now) == "2025-W02"
    assert previous_week_label(now, tz_name="UTC") == "2025-W01"


def test_previous_week_across_year_boundary():
    now = datetime(2025, 1, 6, 8, 0, tzinfo=UTC)
    assert previous_week_label(now) == "2025-W01"
    assert previous_week_label(datetime(2025, 1, 1, 8, 0, tzinfo=UTC)) == "2024-W52"
