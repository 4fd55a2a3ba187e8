from __future__ import annotations

from datetime import date, datetime

import pytest

from guardias_segovia.models import (
    ADDRESS_NOT_AVAILABLE,
    CAPITAL_DAY,
    CAPITAL_NIGHT,
    FULL_DAY,
    NOT_AVAILABLE,
    RURAL_DAYTIME,
    DutyDate,
    DutyTimeSpan,
    Pharmacy,
    PharmacySchedule,
    parse_duty_date,
)


def test_parse_duty_date_computes_weekday_from_calendar() -> None:
    assert parse_duty_date("07-ene", 2025) == DutyDate("martes", 7, "enero", 2025)
    assert parse_duty_date("1\u2010ene", 2026) == DutyDate("jueves", 1, "enero", 2026)


def test_parse_duty_date_rejects_impossible_dates() -> None:
    assert parse_duty_date("31-feb", 2025) is None
    assert parse_duty_date("29-feb", 2025) is None
    assert parse_duty_date("29-feb", 2024) is not None
    assert parse_duty_date("sin fecha", 2025) is None


def test_duty_date_without_year_has_no_weekday() -> None:
    value = DutyDate.build(15, 3, None)
    assert value == DutyDate("", 15, "marzo", None)
    assert value.to_date() is None
    assert value.to_date(fallback_year=2025) == date(2025, 3, 15)
    assert str(value) == "15 de marzo"


def test_duty_date_str_and_sort_key() -> None:
    value = DutyDate.from_date(date(2025, 9, 2))
    assert str(value) == "martes, 2 de septiembre de 2025"
    assert value.sort_key(2000) == (2025, 9, 2)


def test_time_span_keys_and_overnight() -> None:
    assert FULL_DAY.key == "0:00-23:59"
    assert CAPITAL_DAY.key == "10:15-22:00"
    assert CAPITAL_NIGHT.display_name == "22:00 - 10:15"
    assert CAPITAL_NIGHT.spans_multiple_days
    assert not CAPITAL_DAY.spans_multiple_days


def test_time_span_from_key_returns_known_span() -> None:
    assert DutyTimeSpan.from_key("22:00-10:15") is CAPITAL_NIGHT
    assert DutyTimeSpan.from_key("10:00-20:00") is RURAL_DAYTIME
    assert DutyTimeSpan.from_key("8:30-14:00") == DutyTimeSpan(8, 30, 14, 0)
    with pytest.raises(ValueError):
        DutyTimeSpan.from_key("todo el día")


def test_time_span_contains_time_of_day() -> None:
    assert CAPITAL_NIGHT.contains_time_of_day(23, 30)
    assert CAPITAL_NIGHT.contains_time_of_day(9, 0)
    assert not CAPITAL_NIGHT.contains_time_of_day(12, 0)
    assert CAPITAL_DAY.contains_time_of_day(12, 0)


def test_night_shift_starts_the_previous_evening() -> None:
    duty_date = DutyDate.from_date(date(2025, 1, 7))
    assert CAPITAL_NIGHT.contains(duty_date, datetime(2025, 1, 6, 23, 0))
    assert CAPITAL_NIGHT.contains(duty_date, datetime(2025, 1, 7, 10, 0))
    assert not CAPITAL_NIGHT.contains(duty_date, datetime(2025, 1, 7, 23, 0))
    assert CAPITAL_DAY.contains(duty_date, datetime(2025, 1, 7, 12, 0))


def test_last_minute_of_the_day_is_covered() -> None:
    duty_date = DutyDate.from_date(date(2025, 1, 7))
    assert FULL_DAY.contains(duty_date, datetime(2025, 1, 7, 23, 59, 30))
    assert FULL_DAY.contains(duty_date, datetime(2025, 1, 7, 23, 59, 59, 999999))
    assert not FULL_DAY.contains(duty_date, datetime(2025, 1, 8, 0, 0))
    assert CAPITAL_NIGHT.contains(duty_date, datetime(2025, 1, 7, 10, 15, 30))


def test_pharmacy_parse_splits_phone_and_extra_info() -> None:
    pharmacy = Pharmacy.parse("FARMACIA  GARCIA", "C/ Real 12", "(Plaza Mayor) Tfno: 921 123456")
    assert pharmacy.name == "FARMACIA GARCIA"
    assert pharmacy.address == "C/ Real 12"
    assert pharmacy.phone == "921 123456"
    assert pharmacy.additional_info == "(Plaza Mayor)"
    assert pharmacy.formatted_phone == "921 123 456"


def test_pharmacy_parse_without_phone() -> None:
    pharmacy = Pharmacy.parse("FARMACIA GARCIA", "C/ Real 12", "")
    assert pharmacy.phone == NOT_AVAILABLE
    assert pharmacy.additional_info is None
    assert pharmacy.formatted_phone == NOT_AVAILABLE


def test_unknown_pharmacy_keeps_the_key_as_name() -> None:
    pharmacy = Pharmacy.unknown("C/ NUEVA")
    assert pharmacy.name == "C/ NUEVA"
    assert pharmacy.address == ADDRESS_NOT_AVAILABLE
    assert pharmacy.phone == NOT_AVAILABLE


def test_full_day_schedule_answers_both_shift_accessors() -> None:
    pharmacy = Pharmacy("Farmacia Uno", "C/ Uno, 1")
    schedule = PharmacySchedule(DutyDate.from_date(date(2025, 1, 1)), {FULL_DAY: [pharmacy]})
    assert schedule.day_shift_pharmacies == [pharmacy]
    assert schedule.night_shift_pharmacies == [pharmacy]


def test_capital_schedule_separates_day_and_night() -> None:
    day, night = Pharmacy("Día", "C/ A, 1"), Pharmacy("Noche", "C/ B, 2")
    schedule = PharmacySchedule(
        DutyDate.from_date(date(2025, 1, 1)),
        {CAPITAL_DAY: [day], CAPITAL_NIGHT: [night]},
    )
    assert schedule.day_shift_pharmacies == [day]
    assert schedule.night_shift_pharmacies == [night]
