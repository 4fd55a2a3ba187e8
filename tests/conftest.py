from __future__ import annotations

import pytest

from guardias_segovia.config import get_settings

FONT_SIZE = 10.0
# Helvetica: la caja de un carácter va de baseline - 0.207·size a baseline + 0.793·size
HELVETICA_TOP = 0.793


def _escape(text: str) -> bytes:
    raw = text.encode("cp1252")
    return raw.replace(b"\\", b"\\\\").replace(b"(", b"\\(").replace(b")", b"\\)")


def build_pdf(
    pages: list[list[tuple[float, float, str]]],
    width: float = 595.0,
    height: float = 842.0,
    size: float = FONT_SIZE,
) -> bytes:
    """
    PDF mínimo con Helvetica/WinAnsi. Cada página es una lista de
    ``(x, top, texto)`` en coordenadas de pdfplumber (origen arriba a la izquierda).
    """
    objects: list[bytes] = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"",  # Pages, se rellena al final
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>",
    ]
    page_ids = []
    for items in pages:
        ops = []
        for x, top, text in items:
            baseline = height - top - size * HELVETICA_TOP
            ops.append(
                b"BT /F1 %.2f Tf %.2f %.2f Td (" % (size, x, baseline)
                + _escape(text)
                + b") Tj ET"
            )
        content = b"\n".join(ops)
        objects.append(b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream")
        content_id = len(objects)
        objects.append(
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 %.2f %.2f] "
            b"/Resources << /Font << /F1 3 0 R >> >> /Contents %d 0 R >>"
            % (width, height, content_id)
        )
        page_ids.append(len(objects))

    kids = b" ".join(b"%d 0 R" % i for i in page_ids)
    objects[1] = b"<< /Type /Pages /Kids [%s] /Count %d >>" % (kids, len(page_ids))

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_at)
    return bytes(out)


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    for name in ("GUARDIAS_LOG_LEVEL", "GUARDIAS_DEBUG_DUMP", "GUARDIAS_CURRENT_YEAR"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
