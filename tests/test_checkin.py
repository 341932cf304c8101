from datetime import datetime, timezone

import pytest

from clarity.checkin import CHECK_IN_DAYS, days_since, is_check_in_due

NOW = datetime(2026, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("created_at,expected", [
    ("2026-03-10T11:00:00Z", 0),
    ("2026-03-09T12:00:00Z", 1),
    ("2026-03-05T13:00:00Z", 4),
    ("2026-03-03T12:00:00Z", 7),
    ("2025-12-01T00:00:00Z", 7),
    ("2026-03-20T00:00:00Z", 0),
])
def test_days_since_is_clamped(created_at, expected):
    assert days_since(created_at, NOW) == expected


def test_naive_timestamps_are_utc():
    assert days_since("2026-03-08T12:00:00", datetime(2026, 3, 10, 12, 0, 0)) == 2


def test_unparseable_date_is_zero():
    assert days_since("not a date", NOW) == 0


def test_due_after_a_week():
    assert CHECK_IN_DAYS == 7
    assert is_check_in_due("2026-03-03T12:00:00Z", NOW)
    assert not is_check_in_due("2026-03-04T12:00:00Z", NOW)
