from datetime import date, datetime, time, timezone

import pytest

from src.readiness_tracker.readiness_tracker.common.datetime_utils import (
    count_work_days_in_range,
    day_name,
    effective_start_date,
    effective_start_day,
    format_local_date,
    is_valid_timezone,
    is_work_day,
    local_day_bounds,
    minutes_late,
    parse_iso_date,
    parse_work_days,
    period_bounds,
    previous_period,
    shift_bounds,
)
from src.readiness_tracker.readiness_tracker.core.exceptions import ValidationError

MON_FRI = "MON,TUE,WED,THU,FRI"
ALL_DAYS = "MON,TUE,WED,THU,FRI,SAT,SUN"


def test_local_date_uses_company_timezone_not_utc():
    # 17:30 UTC on the 13th is already the 14th in Manila (UTC+8)
    instant = datetime(2025, 1, 13, 17, 30, tzinfo=timezone.utc)

    assert format_local_date(instant, "UTC") == "2025-01-13"
    assert format_local_date(instant, "Asia/Manila") == "2025-01-14"


def test_naive_datetime_is_treated_as_utc():
    assert format_local_date(datetime(2025, 1, 13, 17, 30), "Asia/Manila") == "2025-01-14"


def test_day_name_follows_local_calendar():
    instant = datetime(2025, 1, 17, 20, 0, tzinfo=timezone.utc)  # Friday UTC, Saturday in Manila

    assert day_name(instant, "UTC") == "FRI"
    assert day_name(instant, "Asia/Manila") == "SAT"
    assert is_work_day(instant, MON_FRI, "UTC")
    assert not is_work_day(instant, MON_FRI, "Asia/Manila")


def test_parse_work_days_normalizes_tokens():
    assert parse_work_days(" mon, Tue ,,WED ") == frozenset({"MON", "TUE", "WED"})
    assert parse_work_days("") == frozenset()
    assert parse_work_days(None) == frozenset()


def test_join_at_2359_local_starts_next_calendar_day():
    joined = datetime(2025, 1, 13, 15, 59, tzinfo=timezone.utc)  # 23:59 in Manila

    start = effective_start_date(joined, "Asia/Manila")

    assert start.date() == date(2025, 1, 14)
    assert (start.hour, start.minute) == (0, 0)
    assert effective_start_day(joined, "Asia/Manila") == date(2025, 1, 14)


def test_join_just_after_local_midnight_skips_that_day():
    joined = datetime(2025, 1, 13, 16, 30, tzinfo=timezone.utc)  # 00:30 on the 14th in Manila

    assert effective_start_day(joined, "Asia/Manila") == date(2025, 1, 15)


def test_count_work_days_excludes_holidays_inside_the_set():
    count = count_work_days_in_range(date(2025, 1, 14), date(2025, 1, 17), MON_FRI, "UTC", ["2025-01-16"])

    assert count == 3


def test_count_all_days_is_range_length_when_holidays_fall_outside():
    count = count_work_days_in_range(date(2025, 1, 1), date(2025, 1, 10), ALL_DAYS, "UTC", ["2025-03-01"])

    assert count == 10


def test_count_work_days_edge_cases_are_zero():
    assert count_work_days_in_range(date(2025, 1, 1), date(2025, 1, 10), "", "UTC") == 0
    assert count_work_days_in_range(date(2025, 1, 10), date(2025, 1, 1), MON_FRI, "UTC") == 0


def test_count_work_days_over_weekend():
    # Sat 11th .. Sun 19th holds exactly one MON..FRI week
    assert count_work_days_in_range(date(2025, 1, 11), date(2025, 1, 19), MON_FRI, "UTC") == 5


def test_local_day_bounds_are_half_open_utc():
    start, end = local_day_bounds(date(2025, 1, 14), "Asia/Manila")

    assert start == datetime(2025, 1, 13, 16, 0, tzinfo=timezone.utc)
    assert end == datetime(2025, 1, 14, 16, 0, tzinfo=timezone.utc)


def test_period_and_previous_period_have_equal_length():
    start, end = period_bounds(7, date(2025, 1, 17))
    prev_start, prev_end = previous_period(start, end)

    assert (start, end) == (date(2025, 1, 11), date(2025, 1, 17))
    assert (prev_start, prev_end) == (date(2025, 1, 4), date(2025, 1, 10))


def test_minutes_late_counts_past_grace_cutoff():
    on_grace = datetime(2025, 1, 14, 8, 15, tzinfo=timezone.utc)
    late = datetime(2025, 1, 14, 8, 22, 30, tzinfo=timezone.utc)

    assert minutes_late(on_grace, time(8, 0), 15, "UTC") == 0
    assert minutes_late(late, time(8, 0), 15, "UTC") == 7


def test_overnight_shift_ends_the_next_day():
    start, end = shift_bounds(date(2025, 1, 14), time(22, 0), time(6, 0), "Asia/Manila")

    assert (start.date(), start.hour) == (date(2025, 1, 14), 22)
    assert (end.date(), end.hour) == (date(2025, 1, 15), 6)
    assert shift_bounds(date(2025, 1, 14), time(8, 0), time(17, 0), "UTC")[1].date() == date(2025, 1, 14)


def test_parse_iso_date_and_timezone_validation():
    assert parse_iso_date("2025-01-16") == date(2025, 1, 16)
    with pytest.raises(ValidationError):
        parse_iso_date("16/01/2025")
    assert is_valid_timezone("Asia/Manila")
    assert not is_valid_timezone("Mars/Olympus")
