"""
Calendario de guardias de El Espinar y San Rafael.

El rótulo de cada farmacia cambia entre versiones del PDF (a veces la calle,
a veces el pueblo), así que la farmacia se reconoce por fragmentos de
dirección ("HONTANILLA", "MARQUES PERALES") o por el sufijo "SAN RAFAEL".
Guardias de 24 horas.
"""

from __future__ import annotations

from guardias_segovia.locale_es import contains_key, match_form
from guardias_segovia.locations import EL_ESPINAR, DutyLocation
from guardias_segovia.models import Pharmacy
from guardias_segovia.strategies.line_fold import LineFoldStrategy

HONTANILLA = "AV. HONTANILLA 18"
MARQUES_PERALES = "C/ MARQUES PERALES"
SAN_RAFAEL = "SAN RAFAEL"

PHARMACIES: dict[str, Pharmacy] = {
    HONTANILLA: Pharmacy(
        name="Farmacia Ana María Aparicio Hernán",
        address="Av. Hontanilla, 18, 40400 El Espinar, Segovia",
        phone="921 181 011",
    ),
    MARQUES_PERALES: Pharmacy(
        name="Farmacia Lda M J. Bartolomé Sánchez",
        address="C. Marqués de Perales, 2, 40400 El Espinar, Segovia",
        phone="921 181 171",
    ),
    SAN_RAFAEL: Pharmacy(
        name="Farmacia San Rafael",
        address="Tr.ª Alto del León, 19, 40410 San Rafael, Segovia",
        phone="921 171 105",
    ),
}


class ElEspinarParser(LineFoldStrategy):
    name = "el-espinar"
    location = DutyLocation.from_region(EL_ESPINAR)
    pharmacies = PHARMACIES

    def identify_pharmacy(self, line: str) -> str | None:
        if contains_key(line, "HONTANILLA"):
            return HONTANILLA
        if contains_key(line, "MARQUES PERALES"):
            return MARQUES_PERALES
        if match_form(line).endswith(SAN_RAFAEL):
            return SAN_RAFAEL
        return None
