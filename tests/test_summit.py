from datetime import date, timedelta

from playerzero.services.summit import (
    LEVEL_50_XP,
    is_summit_complete,
    project_summit_date,
)


def test_summit_complete():
    assert is_summit_complete(LEVEL_50_XP)
    assert not is_summit_complete(LEVEL_50_XP - 1)
    assert project_summit_date(LEVEL_50_XP, date(2020, 1, 1), date(2024, 1, 1)) is None


def test_projection_from_daily_rate():
    today = date(2024, 1, 11)
    projected = project_summit_date(10_000_000, date(2024, 1, 1), today)
    # 1M XP/day, 166M to go
    assert projected == today + timedelta(days=166)


def test_projection_rounds_days_up():
    today = date(2024, 1, 2)
    projected = project_summit_date(100_000_000, date(2024, 1, 1), today)
    assert projected == today + timedelta(days=1)


def test_same_day_start_counts_one_day():
    today = date(2024, 1, 1)
    projected = project_summit_date(88_000_000, today, today)
    assert projected == today + timedelta(days=1)


def test_no_projection_without_rate():
    today = date(2024, 1, 11)
    assert project_summit_date(0, date(2024, 1, 1), today) is None
    assert project_summit_date(5_000, None, today) is None


def test_projection_past_calendar_range():
    assert project_summit_date(1, date(2024, 1, 1), date(2024, 1, 3)) is None
