"""
Ensamblado de las asignaciones crudas en calendarios por ubicación.

  - elimina duplicados (misma ubicación, fecha y franja; gana la primera),
  - agrupa las franjas de una misma fecha en un solo ``PharmacySchedule``,
  - ordena por (año, mes, día), usando el año actual si falta el año.
"""

from __future__ import annotations

import logging
from typing import Iterable

import pandas as pd

from guardias_segovia.config import resolve_current_year
from guardias_segovia.locations import DutyLocation
from guardias_segovia.models import DutyAssignment, DutyTimeSpan, Pharmacy, PharmacySchedule

log = logging.getLogger(__name__)

_DATE_COLUMNS = ["location_id", "year", "month", "day"]

ScheduleMap = dict[DutyLocation, list[PharmacySchedule]]


def assemble(
    assignments: Iterable[DutyAssignment],
    current_year: int | None = None,
) -> ScheduleMap:
    """Convierte asignaciones crudas en ``ubicación -> [PharmacySchedule]`` ordenados."""
    items = list(assignments)
    if not items:
        return {}
    fallback_year = resolve_current_year(current_year)

    frame = pd.DataFrame(
        [
            {
                "seq": seq,
                "location_id": a.location.id,
                "year": a.date.year if a.date.year is not None else fallback_year,
                "month": a.date.month_number or 0,
                "day": a.date.day,
                "span": a.span.key,
            }
            for seq, a in enumerate(items)
        ]
    )
    before = len(frame)
    frame = (
        frame.drop_duplicates(subset=_DATE_COLUMNS + ["span"], keep="first")
        .sort_values(_DATE_COLUMNS + ["seq"], kind="stable")
        .reset_index(drop=True)
    )
    if len(frame) < before:
        log.debug("Ensamblado: %d asignaciones duplicadas descartadas", before - len(frame))

    locations = {a.location.id: a.location for a in items}
    result: ScheduleMap = {}
    for (location_id, *_), group in frame.groupby(_DATE_COLUMNS, sort=False):
        first = items[int(group["seq"].iloc[0])]
        shifts: dict[DutyTimeSpan, list[Pharmacy]] = {}
        for seq in group["seq"]:
            assignment = items[int(seq)]
            shifts[assignment.span] = list(assignment.pharmacies)
        result.setdefault(locations[location_id], []).append(
            PharmacySchedule(date=first.date, shifts=shifts)
        )

    for location, schedules in result.items():
        log.debug("%s: %d días de guardia", location.name, len(schedules))
    return result

