"""Consultas sobre calendarios ya ensamblados: quién está de guardia ahora."""

from __future__ import annotations

from datetime import date, datetime

from guardias_segovia.models import DutyTimeSpan, PharmacySchedule


def find_current_schedule(
    schedules: list[PharmacySchedule],
    moment: datetime,
) -> tuple[PharmacySchedule, DutyTimeSpan] | None:
    """
    Primer (calendario, franja) cuya franja contiene ``moment``.

    El turno de noche de la capital de la fecha D cubre desde las 22:00 del
    día D-1 hasta las 10:15 del día D.
    """
    for schedule in schedules:
        for span in schedule.shifts:
            if span.contains(schedule.date, moment):
                return schedule, span
    return None


def schedules_for_date(schedules: list[PharmacySchedule], day: date) -> list[PharmacySchedule]:
    return [s for s in schedules if s.date.to_date() == day]
