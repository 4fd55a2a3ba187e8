"""Configuración leída del entorno (y de un fichero .env si existe)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from functools import lru_cache

from dotenv import load_dotenv

_TRUE_VALUES = {"1", "true", "yes", "si", "sí", "on"}


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    # Vuelca en el log la tabulación por columnas de cada página rural
    debug_dump: bool = False
    # Año de referencia para validar y como último recurso; None = año actual
    current_year: int | None = None

    def reference_year(self) -> int:
        return self.current_year if self.current_year is not None else date.today().year


@lru_cache
def get_settings() -> Settings:
    load_dotenv()
    raw_year = os.environ.get("GUARDIAS_CURRENT_YEAR", "").strip()
    return Settings(
        log_level=os.environ.get("GUARDIAS_LOG_LEVEL", "INFO").upper(),
        debug_dump=os.environ.get("GUARDIAS_DEBUG_DUMP", "").strip().lower() in _TRUE_VALUES,
        current_year=int(raw_year) if raw_year.isdigit() else None,
    )


def resolve_current_year(current_year: int | None = None) -> int:
    """Un año explícito tiene prioridad sobre la configuración."""
    if current_year is not None:
        return current_year
    return get_settings().reference_year()
