"""
Formato persistido de los calendarios y exportación plana.

El JSON lleva ``cacheVersion``: cualquier cambio en los nombres o tipos de
los campos de DutyDate, Pharmacy o PharmacySchedule obliga a subir
``CACHE_VERSION`` para invalidar las cachés antiguas.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

import pandas as pd

from guardias_segovia.locations import location_by_id
from guardias_segovia.models import NOT_AVAILABLE, DutyDate, DutyTimeSpan, Pharmacy, PharmacySchedule

log = logging.getLogger(__name__)

CACHE_VERSION = 2

FRAME_COLUMNS = [
    "location_id",
    "location_name",
    "date",
    "day_of_week",
    "shift",
    "shift_hours",
    "pharmacy_name",
    "address",
    "phone",
    "additional_info",
]


class CacheVersionError(ValueError):
    """La caché se escribió con otra versión del formato."""


# ─────────────────────────────────────────────────────────────
# DICCIONARIOS
# ─────────────────────────────────────────────────────────────

def date_to_dict(value: DutyDate) -> dict[str, Any]:
    return {
        "dayOfWeek": value.day_of_week,
        "day": value.day,
        "month": value.month,
        "year": value.year,
    }


def date_from_dict(data: dict[str, Any]) -> DutyDate:
    return DutyDate(
        day_of_week=data["dayOfWeek"],
        day=int(data["day"]),
        month=data["month"],
        year=data.get("year"),
    )


def pharmacy_to_dict(value: Pharmacy) -> dict[str, Any]:
    return {
        "name": value.name,
        "address": value.address,
        "phone": value.phone,
        "additionalInfo": value.additional_info,
    }


def pharmacy_from_dict(data: dict[str, Any]) -> Pharmacy:
    return Pharmacy(
        name=data["name"],
        address=data["address"],
        phone=data.get("phone") or NOT_AVAILABLE,
        additional_info=data.get("additionalInfo"),
    )


def schedule_to_dict(value: PharmacySchedule) -> dict[str, Any]:
    return {
        "date": date_to_dict(value.date),
        "shifts": {
            span.key: [pharmacy_to_dict(p) for p in pharmacies]
            for span, pharmacies in value.shifts.items()
        },
    }


def schedule_from_dict(data: dict[str, Any]) -> PharmacySchedule:
    return PharmacySchedule(
        date=date_from_dict(data["date"]),
        shifts={
            DutyTimeSpan.from_key(key): [pharmacy_from_dict(p) for p in pharmacies]
            for key, pharmacies in data["shifts"].items()
        },
    )


def to_payload(schedules: dict) -> dict[str, Any]:
    return {
        "cacheVersion": CACHE_VERSION,
        "schedules": {
            location.id: [schedule_to_dict(s) for s in items]
            for location, items in schedules.items()
        },
    }


def from_payload(payload: dict[str, Any]) -> dict:
    version = payload.get("cacheVersion")
    if version != CACHE_VERSION:
        raise CacheVersionError(
            f"Versión de caché {version!r} incompatible (se esperaba {CACHE_VERSION})"
        )
    return {
        location_by_id(location_id): [schedule_from_dict(s) for s in items]
        for location_id, items in payload["schedules"].items()
    }


# ─────────────────────────────────────────────────────────────
# EXPORTACIÓN
# ─────────────────────────────────────────────────────────────

def to_frame(schedules: dict) -> pd.DataFrame:
    """Una fila por (ubicación, fecha, franja, farmacia)."""
    rows = []
    for location, items in schedules.items():
        for schedule in items:
            day = schedule.date.to_date()
            for span, pharmacies in schedule.shifts.items():
                for pharmacy in pharmacies:
                    rows.append({
                        "location_id":     location.id,
                        "location_name":   location.name,
                        "date":            day.isoformat() if day else None,
                        "day_of_week":     schedule.date.day_of_week,
                        "shift":           span.name or span.key,
                        "shift_hours":     span.display_name,
                        "pharmacy_name":   pharmacy.name,
                        "address":         pharmacy.address,
                        "phone":           pharmacy.phone,
                        "additional_info": pharmacy.additional_info,
                    })
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def write_outputs(schedules: dict, output_dir: str, stem: str) -> tuple[str, str]:
    """Escribe ``<stem>.json`` (caché versionada) y ``<stem>.csv``; devuelve sus rutas."""
    os.makedirs(output_dir, exist_ok=True)
    json_path = os.path.join(output_dir, f"{stem}.json")
    csv_path = os.path.join(output_dir, f"{stem}.csv")

    with open(json_path, "w", encoding="utf-8") as fh:
        json.dump(to_payload(schedules), fh, ensure_ascii=False, indent=2)
    to_frame(schedules).to_csv(csv_path, index=False, encoding="utf-8-sig")

    log.info("Salidas escritas: %s, %s", json_path, csv_path)
    return json_path, csv_path
