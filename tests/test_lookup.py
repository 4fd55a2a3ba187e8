from __future__ import annotations

from datetime import date, datetime

from guardias_segovia.lookup import find_current_schedule, schedules_for_date
from guardias_segovia.models import (
    CAPITAL_DAY,
    CAPITAL_NIGHT,
    FULL_DAY,
    DutyDate,
    Pharmacy,
    PharmacySchedule,
)

DAY = Pharmacy("FARMACIA DIA", "C/ A, 1")
NIGHT = Pharmacy("FARMACIA NOCHE", "C/ B, 2")


def _capital_day(day: int) -> PharmacySchedule:
    return PharmacySchedule(
        DutyDate.from_date(date(2025, 1, day)),
        {CAPITAL_DAY: [DAY], CAPITAL_NIGHT: [NIGHT]},
    )


def test_daytime_moment_finds_day_shift() -> None:
    schedules = [_capital_day(6), _capital_day(7)]
    found = find_current_schedule(schedules, datetime(2025, 1, 6, 12, 0))
    assert found == (schedules[0], CAPITAL_DAY)


def test_late_evening_belongs_to_next_date_night_shift() -> None:
    schedules = [_capital_day(6), _capital_day(7)]
    schedule, span = find_current_schedule(schedules, datetime(2025, 1, 6, 23, 0))
    assert schedule.date.day == 7
    assert span == CAPITAL_NIGHT


def test_early_morning_belongs_to_same_date_night_shift() -> None:
    schedules = [_capital_day(6), _capital_day(7)]
    schedule, span = find_current_schedule(schedules, datetime(2025, 1, 7, 9, 30))
    assert schedule.date.day == 7
    assert span == CAPITAL_NIGHT


def test_no_schedule_covers_the_moment() -> None:
    assert find_current_schedule([_capital_day(6)], datetime(2025, 2, 1, 12, 0)) is None


def test_schedules_for_date() -> None:
    full = PharmacySchedule(DutyDate.from_date(date(2025, 1, 8)), {FULL_DAY: [DAY]})
    schedules = [_capital_day(6), full]
    assert schedules_for_date(schedules, date(2025, 1, 8)) == [full]
    assert schedules_for_date(schedules, date(2025, 1, 9)) == []


def test_full_day_schedule_covers_the_last_seconds() -> None:
    full = PharmacySchedule(DutyDate.from_date(date(2025, 1, 8)), {FULL_DAY: [DAY]})
    assert find_current_schedule([full], datetime(2025, 1, 8, 23, 59, 30)) == (full, FULL_DAY)
