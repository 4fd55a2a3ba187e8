"""
Modelo de datos de las guardias: fechas, farmacias, franjas horarias y
calendarios ensamblados.

Todas las entidades son objetos de valor inmutables construidos al parsear un
PDF; la igualdad es estructural.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, time
from typing import TYPE_CHECKING

from guardias_segovia.locale_es import (
    MONTHS_ES,
    RE_SHORT_DATE,
    WEEKDAYS_ES,
    clean_space,
    month_from_abbreviation,
    month_from_name,
)

if TYPE_CHECKING:
    from guardias_segovia.locations import DutyLocation

NOT_AVAILABLE = "No disponible"
ADDRESS_NOT_AVAILABLE = "Dirección no disponible"

RE_PHONE_INFO = re.compile(r"Tfno:\s*(\d{3}\s*\d{6})", re.IGNORECASE)


# ─────────────────────────────────────────────────────────────
# FECHAS
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DutyDate:
    """
    Fecha de guardia: (día de la semana, día, nombre del mes, año).

    El año puede ser ``None`` mientras se parsea; en ese caso el día de la
    semana queda vacío porque no es calculable.
    """
    day_of_week: str
    day: int
    month: str
    year: int | None = None

    @classmethod
    def from_date(cls, value: date) -> "DutyDate":
        return cls(
            day_of_week=WEEKDAYS_ES[value.weekday()],
            day=value.day,
            month=MONTHS_ES[value.month],
            year=value.year,
        )

    @classmethod
    def build(cls, day: int, month: int, year: int | None) -> "DutyDate | None":
        """Construye una fecha validando el calendario. Devuelve None si no existe."""
        if month not in MONTHS_ES:
            return None
        if year is None:
            if not 1 <= day <= 31:
                return None
            return cls(day_of_week="", day=day, month=MONTHS_ES[month], year=None)
        try:
            return cls.from_date(date(year, month, day))
        except ValueError:
            return None

    @property
    def month_number(self) -> int | None:
        return month_from_name(self.month)

    def to_date(self, fallback_year: int | None = None) -> date | None:
        year = self.year if self.year is not None else fallback_year
        month = self.month_number
        if year is None or month is None:
            return None
        try:
            return date(year, month, self.day)
        except ValueError:
            return None

    def sort_key(self, fallback_year: int) -> tuple[int, int, int]:
        year = self.year if self.year is not None else fallback_year
        return (year, self.month_number or 0, self.day)

    def __str__(self) -> str:
        base = f"{self.day_of_week}, {self.day} de {self.month}".lstrip(", ")
        return f"{base} de {self.year}" if self.year is not None else base


def parse_duty_date(token: str, year: int | None) -> DutyDate | None:
    """
    Convierte un token ``dd-mmm`` ("07-ene", "7‐ene") en DutyDate.

    El día de la semana se calcula siempre a partir del calendario gregoriano.
    Devuelve None si el token no es una fecha válida.
    """
    m = RE_SHORT_DATE.search(token)
    if not m:
        return None
    month = month_from_abbreviation(m.group(2))
    if month is None:
        return None
    return DutyDate.build(int(m.group(1)), month, year)


# ─────────────────────────────────────────────────────────────
# FRANJAS HORARIAS
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DutyTimeSpan:
    start_hour: int
    start_minute: int
    end_hour: int
    end_minute: int
    name: str = field(default="", compare=False)

    @property
    def spans_multiple_days(self) -> bool:
        return (self.end_hour, self.end_minute) < (self.start_hour, self.start_minute)

    @property
    def key(self) -> str:
        """Clave de serialización: "10:15-22:00", "0:00-23:59"."""
        return (
            f"{self.start_hour}:{self.start_minute:02d}"
            f"-{self.end_hour}:{self.end_minute:02d}"
        )

    @property
    def display_name(self) -> str:
        return (
            f"{self.start_hour:02d}:{self.start_minute:02d}"
            f" - {self.end_hour:02d}:{self.end_minute:02d}"
        )

    def contains_time_of_day(self, hour: int, minute: int) -> bool:
        current = hour * 60 + minute
        start = self.start_hour * 60 + self.start_minute
        end = self.end_hour * 60 + self.end_minute
        if self.spans_multiple_days:
            return current >= start or current <= end
        return start <= current <= end

    def contains(self, duty_date: DutyDate, moment: datetime) -> bool:
        """
        Indica si ``moment`` cae dentro de esta franja para la fecha dada.

        Una franja que cruza la medianoche (22:00 - 10:15) empieza el día
        anterior a la fecha de guardia y termina en la propia fecha.
        """
        shift_day = duty_date.to_date()
        if shift_day is None:
            return False
        start_day = shift_day - timedelta(days=1) if self.spans_multiple_days else shift_day
        start = datetime.combine(start_day, time(self.start_hour, self.start_minute))
        end = datetime.combine(shift_day, time(self.end_hour, self.end_minute))
        # Resolución de minutos, como los horarios publicados
        return start <= moment.replace(second=0, microsecond=0, tzinfo=None) <= end

    @classmethod
    def from_key(cls, key: str) -> "DutyTimeSpan":
        try:
            start, end = key.split("-")
            sh, sm = (int(p) for p in start.split(":"))
            eh, em = (int(p) for p in end.split(":"))
        except ValueError as e:
            raise ValueError(f"Franja horaria inválida: {key!r}") from e
        span = cls(sh, sm, eh, em)
        for known in KNOWN_SPANS:
            if known == span:
                return known
        return span

    def __str__(self) -> str:
        return f"{self.name} ({self.display_name})" if self.name else self.display_name


FULL_DAY = DutyTimeSpan(0, 0, 23, 59, name="24 horas")
CAPITAL_DAY = DutyTimeSpan(10, 15, 22, 0, name="Diurno")
CAPITAL_NIGHT = DutyTimeSpan(22, 0, 10, 15, name="Nocturno")
RURAL_DAYTIME = DutyTimeSpan(10, 0, 20, 0, name="Diurno")
RURAL_EXTENDED_DAYTIME = DutyTimeSpan(10, 0, 22, 0, name="Diurno extendido")

KNOWN_SPANS = (FULL_DAY, CAPITAL_DAY, CAPITAL_NIGHT, RURAL_DAYTIME, RURAL_EXTENDED_DAYTIME)


# ─────────────────────────────────────────────────────────────
# FARMACIAS
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Pharmacy:
    name: str
    address: str
    phone: str = NOT_AVAILABLE
    additional_info: str | None = None

    @classmethod
    def unknown(cls, key: str) -> "Pharmacy":
        """Registro sintético para una clave que no está en la tabla estática."""
        return cls(name=key, address=ADDRESS_NOT_AVAILABLE, phone=NOT_AVAILABLE)

    @classmethod
    def parse(cls, name: str, address: str, info: str) -> "Pharmacy":
        """
        Construye una farmacia a partir de las tres líneas de una celda del
        calendario de la capital: nombre, dirección y "(info) Tfno: 921 123456".
        """
        m = RE_PHONE_INFO.search(info)
        if m:
            phone = clean_space(m.group(1))
            extra = clean_space(info[:m.start()] + " " + info[m.end():])
        else:
            phone = NOT_AVAILABLE
            extra = clean_space(info)
        return cls(
            name=clean_space(name),
            address=clean_space(address),
            phone=phone,
            additional_info=extra or None,
        )

    @property
    def formatted_phone(self) -> str:
        digits = re.sub(r"\D", "", self.phone)
        if len(digits) != 9:
            return self.phone
        return f"{digits[0:3]} {digits[3:6]} {digits[6:9]}"


# ─────────────────────────────────────────────────────────────
# CALENDARIO
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PharmacySchedule:
    """Un día de guardia: la fecha y las farmacias de cada franja horaria."""
    date: DutyDate
    shifts: dict[DutyTimeSpan, list[Pharmacy]]

    @property
    def day_shift_pharmacies(self) -> list[Pharmacy]:
        return self.shifts.get(CAPITAL_DAY) or self.shifts.get(FULL_DAY) or []

    @property
    def night_shift_pharmacies(self) -> list[Pharmacy]:
        return self.shifts.get(CAPITAL_NIGHT) or self.shifts.get(FULL_DAY) or []


@dataclass(frozen=True)
class DutyAssignment:
    """Asignación cruda emitida por una estrategia antes del ensamblado."""
    location: "DutyLocation"
    date: DutyDate
    span: DutyTimeSpan
    pharmacies: tuple[Pharmacy, ...]
