"""
Interfaz común de las estrategias de parseo por región.

``ParsingStrategy.parse_schedules`` es la frontera: abre el PDF una sola vez,
lo cierra siempre y no deja escapar ninguna excepción. Un documento ilegible
produce un resultado vacío; una página ilegible no aporta nada pero no detiene
el resto.
"""

from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from typing import Any, Iterator

import pdfplumber

from guardias_segovia.assembler import ScheduleMap, assemble
from guardias_segovia.config import resolve_current_year
from guardias_segovia.locale_es import split_lines
from guardias_segovia.models import DutyAssignment
from guardias_segovia.year_detection import YearDetectionResult, detect_year

log = logging.getLogger(__name__)

X_TOLERANCE = 3
Y_TOLERANCE = 3


def page_text(page: Any) -> str:
    return page.extract_text(x_tolerance=X_TOLERANCE, y_tolerance=Y_TOLERANCE) or ""


class ParsingStrategy(ABC):
    """Una implementación por región; sin estado compartido entre documentos."""

    name = "base"

    def __init__(self, current_year: int | None = None) -> None:
        self.current_year = current_year

    # ─────────────────────────────────────────────────────────
    # Frontera pública
    # ─────────────────────────────────────────────────────────

    def parse_schedules(self, pdf_bytes: bytes, pdf_url: str | None = None) -> ScheduleMap:
        if not pdf_bytes:
            log.warning("[%s] PDF vacío: no hay nada que parsear", self.name)
            return {}
        current = resolve_current_year(self.current_year)
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                log.info("[%s] %d páginas", self.name, len(pdf.pages))
                assignments = list(self.parse_document(pdf, pdf_url, current))
        except Exception:
            log.exception("[%s] No se pudo leer el PDF", self.name)
            return {}

        schedules = assemble(assignments, current_year=current)
        for location, items in schedules.items():
            log.info("[%s] %s: %d días de guardia", self.name, location.name, len(items))
        return schedules

    @abstractmethod
    def parse_document(
        self,
        pdf: Any,
        pdf_url: str | None,
        current_year: int,
    ) -> Iterator[DutyAssignment]:
        """Recorre las páginas en orden y produce asignaciones crudas."""

    # ─────────────────────────────────────────────────────────
    # Utilidades para las subclases
    # ─────────────────────────────────────────────────────────

    def detect_document_year(
        self,
        pdf: Any,
        pdf_url: str | None,
        current_year: int,
    ) -> YearDetectionResult:
        """Detección del año a partir de la primera página legible."""
        first_text = ""
        for index, page in enumerate(pdf.pages, start=1):
            try:
                first_text = page_text(page)
            except Exception as e:
                log.warning("[%s] Página %d ilegible al detectar el año: %s", self.name, index, e)
                continue
            if first_text.strip():
                break
        result = detect_year(first_text, pdf_url, current_year=current_year)
        if result.warning:
            log.warning("[%s] %s", self.name, result.warning)
        log.info("[%s] Año detectado: %s (fuente: %s)", self.name, result.year, result.source.value)
        return result

    def iter_pages(self, pdf: Any) -> Iterator[tuple[int, Any, list[str]]]:
        """(número de página, página, líneas). Las páginas ilegibles se saltan con un aviso."""
        for index, page in enumerate(pdf.pages, start=1):
            try:
                lines = split_lines(page_text(page))
            except Exception as e:
                log.warning("[%s] Página %d ilegible: %s", self.name, index, e)
                continue
            log.debug("[%s] Página %d: %d líneas", self.name, index, len(lines))
            yield index, page, lines

    def skip_page(self, index: int, error: Exception) -> None:
        """Una página que falla al parsearse no aporta nada; el estado sigue el de la anterior."""
        log.warning("[%s] Página %d descartada: %s", self.name, index, error)
