"""
Calendario de guardias de Cuéllar.

Filas semanales con un rango de fechas ("01-ene al 07-ene") y la calle de la
farmacia ("Av C.J. CELA"), en la misma línea o repartidas en dos. El cambio
de agosto a septiembre viene en un formato antiguo ("DOMINGO 31 DE AGOSTO Y
LUNES 1 DE SEPTIEMBRE") que se reescribe al formato corto.

Las guardias son de 24 horas: no hay turnos de día y de noche.
"""

from __future__ import annotations

from guardias_segovia.locale_es import contains_key
from guardias_segovia.locations import CUELLAR, DutyLocation
from guardias_segovia.models import NOT_AVAILABLE, Pharmacy
from guardias_segovia.strategies.line_fold import LineFoldStrategy

# Clave = fragmento de dirección tal como aparece en el PDF
PHARMACIES: dict[str, Pharmacy] = {
    "Av C.J. CELA": Pharmacy(
        name="Farmacia Fernando Redondo",
        address="Av. Camilo Jose Cela, 46, 40200 Cuéllar, Segovia",
        phone=NOT_AVAILABLE,
    ),
    "Ctra. BAHABON": Pharmacy(
        name="Farmacia San Andrés",
        address="Ctra. Bahabón, 9, 40200 Cuéllar, Segovia",
        phone="921144794",
    ),
    "C/ RESINA": Pharmacy(
        name="Farmacia Ldo. Fco. Javier Alcaraz García de la Barrera",
        address="C. Resina, 14, 40200 Cuéllar, Segovia",
        phone="921144812",
    ),
    "STA. MARINA": Pharmacy(
        name="Farmacia Ldo. César Cabrerizo Izquierdo",
        address="Calle Sta. Marina, 5, 40200 Cuéllar, Segovia",
        phone="921140606",
    ),
}


class CuellarParser(LineFoldStrategy):
    name = "cuellar"
    location = DutyLocation.from_region(CUELLAR)
    pharmacies = PHARMACIES

    def identify_pharmacy(self, line: str) -> str | None:
        for key in self.pharmacies:
            if contains_key(line, key):
                return key
        return None
