from __future__ import annotations

import io
from datetime import date

import pandas as pd
import pdfplumber

from guardias_segovia.locations import (
    CANTALEJO,
    LA_GRANJA,
    LA_SIERRA,
    NAVAS_DE_LA_ASUNCION,
    RIAZA_SEPULVEDA,
    DutyLocation,
)
from guardias_segovia.models import FULL_DAY, RURAL_DAYTIME, RURAL_EXTENDED_DAYTIME, DutyDate
from guardias_segovia.strategies.segovia_rural import (
    CANTALEJO_PHARMACIES,
    LA_GRANJA_DOLORES,
    LA_GRANJA_PHARMACIES,
    LA_GRANJA_VALENCIANA,
    SegoviaRuralParser,
    cantalejo_assignments,
    extract_rural_date,
    first_la_granja_label,
    la_granja_assignments,
    parse_rural_lines,
    pharmacies_by_zone,
    reconcile_two_digit_year,
    table_to_lines,
    tabulate_page,
)


def _days(start: int, count: int) -> list[DutyDate]:
    return [DutyDate.from_date(date(2025, 9, start + i)) for i in range(count)]


def test_reconcile_two_digit_year() -> None:
    assert reconcile_two_digit_year(25, 2024) == 2025
    assert reconcile_two_digit_year(24, 2025) == 2024
    assert reconcile_two_digit_year(26, 2026) == 2026


def test_extract_rural_date() -> None:
    assert extract_rural_date("02-sep-25 RIAZA", 2025) == DutyDate("martes", 2, "septiembre", 2025)
    assert extract_rural_date("31-dic-24 RIAZA", 2025).year == 2024
    assert extract_rural_date("RIAZA COCA", 2025) is None


def test_pharmacies_by_zone_groups_by_span() -> None:
    found = pharmacies_by_zone("02-sep-25 RIAZA CEREZO ABAJO PRÁDENA COCA")
    riaza = found[RIAZA_SEPULVEDA]
    assert set(riaza) == {FULL_DAY, RURAL_EXTENDED_DAYTIME}
    assert riaza[FULL_DAY][0].name == "Farmacia César Fernando Gutiérrez Miguel"
    assert found[LA_SIERRA][RURAL_DAYTIME][0].name == "Farmacia Ana Belén Tomero Díez"
    assert NAVAS_DE_LA_ASUNCION in found


def test_misspelling_does_not_duplicate_pharmacy() -> None:
    found = pharmacies_by_zone("TORRECILLA TORRECELLA")
    (pharmacies,) = found.values()
    assert len(pharmacies[RURAL_DAYTIME]) == 1


def test_first_la_granja_label() -> None:
    assert first_la_granja_label("RIAZA Plaza los Dolores C/ Valenciana") == LA_GRANJA_DOLORES
    assert first_la_granja_label("RIAZA C/ VALENCIANA") == LA_GRANJA_VALENCIANA
    assert first_la_granja_label("RIAZA COCA") is None


def test_parse_rural_lines() -> None:
    result = parse_rural_lines(
        [
            "SERVICIOS DE URGENCIA RURALES 2025",
            "02-sep-25 RIAZA PRÁDENA C/ Valenciana COCA",
            "03-sep-25 SEPÚLVEDA ARCONES Plaza los Dolores BERNARDOS",
        ],
        base_year=2025,
    )
    assert [d.day for d in result.dates] == [2, 3]
    assert result.la_granja_first == LA_GRANJA_VALENCIANA
    locations = {a.location for a in result.assignments}
    assert DutyLocation.from_zbs(RIAZA_SEPULVEDA) in locations
    assert DutyLocation.from_zbs(LA_GRANJA) not in locations
    assert len(result.assignments) == 6


def test_la_granja_alternates_weekly() -> None:
    dates = _days(1, 15)
    assignments = la_granja_assignments(dates, LA_GRANJA_DOLORES)
    first = LA_GRANJA_PHARMACIES[LA_GRANJA_DOLORES].pharmacy
    second = LA_GRANJA_PHARMACIES[LA_GRANJA_VALENCIANA].pharmacy
    owners = [a.pharmacies[0] for a in assignments]
    assert owners[:7] == [first] * 7
    assert owners[7:14] == [second] * 7
    assert owners[14] == first
    assert {a.span for a in assignments} == {RURAL_EXTENDED_DAYTIME}
    assert la_granja_assignments(dates, None) == []


def test_cantalejo_lists_both_pharmacies_every_day() -> None:
    assignments = cantalejo_assignments(_days(1, 3))
    assert len(assignments) == 3
    assert all(a.pharmacies == CANTALEJO_PHARMACIES for a in assignments)
    assert {a.location for a in assignments} == {DutyLocation.from_zbs(CANTALEJO)}


def test_table_to_lines() -> None:
    table = pd.DataFrame([
        {"top": 60.0, "date": "02-sep-25", "riaza-sepulveda": "RIAZA", "la-granja": "",
         "la-sierra": "PRÁDENA", "fuentiduena": "", "carbonero": "", "navas-asuncion": "COCA",
         "villacastin": ""},
    ])
    assert table_to_lines(table) == ["02-sep-25 RIAZA PRÁDENA COCA"]


def test_parse_pdf(make_pdf) -> None:
    rows = [(40, 30, "SERVICIOS DE URGENCIA RURALES 2025")]
    for index in range(8):
        label = "C/ Valenciana" if index < 7 else "Plaza los Dolores"
        rows.append((42, 60 + index * 20, f"{index + 1:02d}-sep-25 RIAZA {label} COCA NAVALMANZANO"))
    pdf_bytes = make_pdf([rows], width=842, height=595)

    result = SegoviaRuralParser(current_year=2025, debug_dump=False).parse_schedules(pdf_bytes)

    riaza = result[DutyLocation.from_zbs(RIAZA_SEPULVEDA)]
    assert [s.date.to_date() for s in riaza] == [date(2025, 9, d) for d in range(1, 9)]
    assert riaza[0].day_shift_pharmacies[0].name == "Farmacia César Fernando Gutiérrez Miguel"

    la_granja = result[DutyLocation.from_zbs(LA_GRANJA)]
    assert len(la_granja) == 8
    valenciana = LA_GRANJA_PHARMACIES[LA_GRANJA_VALENCIANA].pharmacy
    dolores = LA_GRANJA_PHARMACIES[LA_GRANJA_DOLORES].pharmacy
    assert la_granja[0].shifts[RURAL_EXTENDED_DAYTIME] == [valenciana]
    assert la_granja[7].shifts[RURAL_EXTENDED_DAYTIME] == [dolores]

    cantalejo = result[DutyLocation.from_zbs(CANTALEJO)]
    assert len(cantalejo) == 8
    assert cantalejo[0].shifts[RURAL_DAYTIME] == list(CANTALEJO_PHARMACIES)


def test_tabulate_page_reads_zone_columns(make_pdf) -> None:
    pdf_bytes = make_pdf(
        [[
            (44, 60, "02-sep-25"), (180, 60, "RIAZA"), (705, 60, "COCA"),
            (44, 80, "03-sep-25"), (180, 80, "AYLLON"), (505, 80, "ARCONES"),
        ]],
        width=842, height=595, size=6,
    )
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        table = tabulate_page(pdf.pages[0])

    assert list(table["date"]) == ["02-sep-25", "03-sep-25"]
    assert list(table["riaza-sepulveda"]) == ["RIAZA", "AYLLON"]
    assert list(table["navas-asuncion"]) == ["COCA", ""]

    result = parse_rural_lines(table_to_lines(table), base_year=2025)
    assert [d.day for d in result.dates] == [2, 3]
    assert {a.location for a in result.assignments} == {
        DutyLocation.from_zbs(RIAZA_SEPULVEDA),
        DutyLocation.from_zbs(LA_SIERRA),
        DutyLocation.from_zbs(NAVAS_DE_LA_ASUNCION),
    }


def test_failing_page_is_skipped(make_pdf, monkeypatch) -> None:
    parse_page = SegoviaRuralParser.parse_page

    def failing_second_page(self, index, page, lines, base_year, la_granja_first):
        if index == 2:
            raise RuntimeError("página corrupta")
        return parse_page(self, index, page, lines, base_year, la_granja_first)

    monkeypatch.setattr(SegoviaRuralParser, "parse_page", failing_second_page)
    pages = [
        [(40, 30, "SERVICIOS DE URGENCIA RURALES 2025"), (42, 60, f"{day:02d}-sep-25 RIAZA COCA")]
        for day in (1, 2, 3)
    ]
    result = SegoviaRuralParser(current_year=2025, debug_dump=False).parse_schedules(
        make_pdf(pages, width=842, height=595)
    )

    riaza = result[DutyLocation.from_zbs(RIAZA_SEPULVEDA)]
    assert [s.date.to_date() for s in riaza] == [date(2025, 9, 1), date(2025, 9, 3)]
    assert len(result[DutyLocation.from_zbs(CANTALEJO)]) == 2
