"""Tests for tenant-local calendar and cutoff evaluation."""

import logging
from datetime import UTC, date, datetime, time

from meal_engine.services.calendar import (
    iso_week,
    parse_cutoff,
    resolve_timezone,
    snapshot,
    week_bounds,
)
from tests.conftest import local_time


def test_local_today_differs_from_utc_date_near_midnight() -> None:
    # 20:30 UTC is already the next day in Dushanbe (UTC+5)
    now = datetime(2024, 12, 1, 20, 30, tzinfo=UTC)

    calendar = snapshot(now, "Asia/Dushanbe", time(10, 30))

    assert calendar.today == date(2024, 12, 2)
    assert calendar.yesterday == date(2024, 12, 1)
    assert calendar.is_cutoff_passed is False


def test_cutoff_boundary_is_exclusive() -> None:
    day = date(2024, 12, 3)
    cutoff = time(10, 30)

    before = snapshot(local_time(day, 10, 29, 59), "Asia/Dushanbe", cutoff)
    exactly = snapshot(local_time(day, 10, 30, 0), "Asia/Dushanbe", cutoff)
    after = snapshot(local_time(day, 10, 30, 1), "Asia/Dushanbe", cutoff)

    assert before.is_cutoff_passed is False
    assert exactly.is_cutoff_passed is False
    assert after.is_cutoff_passed is True


def test_unknown_timezone_falls_back_to_utc(caplog, monkeypatch) -> None:
    monkeypatch.setattr(logging.getLogger("meal_engine"), "propagate", True)
    with caplog.at_level(logging.WARNING, logger="meal_engine"):
        calendar = snapshot(
            datetime(2024, 12, 1, 23, 0, tzinfo=UTC), "Mars/Olympus", time(10, 30)
        )

    assert calendar.timezone == "UTC"
    assert calendar.today == date(2024, 12, 1)
    assert "Mars/Olympus" in caplog.text


def test_empty_timezone_is_utc() -> None:
    assert resolve_timezone(None).key == "UTC"
    assert resolve_timezone("").key == "UTC"


def test_naive_instant_is_treated_as_utc() -> None:
    calendar = snapshot(datetime(2024, 12, 1, 4, 0), "Asia/Dushanbe", time(10, 30))

    assert calendar.local_now.hour == 9
    assert calendar.now_utc.tzinfo is UTC


def test_locked_days() -> None:
    calendar = snapshot(
        local_time(date(2024, 12, 3), 11, 0), "Asia/Dushanbe", time(10, 30)
    )

    assert calendar.is_locked(date(2024, 12, 2))
    assert calendar.is_locked(date(2024, 12, 3))
    assert not calendar.is_locked(date(2024, 12, 4))
    assert calendar.is_past(date(2024, 12, 2))
    assert not calendar.is_past(date(2024, 12, 3))


def test_cutoff_of_another_day() -> None:
    calendar = snapshot(local_time(date(2024, 12, 8)), "Asia/Dushanbe", time(10, 30))

    assert calendar.is_after_cutoff(local_time(date(2024, 12, 5), 15))
    assert not calendar.is_after_cutoff(local_time(date(2024, 12, 5), 10, 30))
    assert not calendar.is_cutoff_passed


def test_local_date_of_instant() -> None:
    calendar = snapshot(local_time(date(2024, 12, 3)), "Asia/Dushanbe", time(10, 30))

    assert calendar.local_date_of(datetime(2024, 12, 4, 19, 30, tzinfo=UTC)) == date(
        2024, 12, 5
    )


def test_iso_week_and_bounds() -> None:
    assert iso_week(date(2024, 12, 1)) == (2024, 48)
    assert iso_week(date(2024, 12, 2)) == (2024, 49)
    assert iso_week(date(2024, 12, 30)) == (2025, 1)
    assert week_bounds(date(2024, 12, 4)) == (date(2024, 12, 2), date(2024, 12, 8))


def test_parse_cutoff() -> None:
    assert parse_cutoff("10:30") == time(10, 30)
    assert parse_cutoff(" 09:05 ") == time(9, 5)
    assert parse_cutoff(time(8, 0)) == time(8, 0)
