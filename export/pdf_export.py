from __future__ import annotations

import io
from typing import Any, Iterable, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from xml.sax.saxutils import escape

from eventos.presets import CLIENT_FIELDS, EVENT_FIELDS, FIELD_LABELS, META_FIELDS

_GRID = TableStyle(
    [
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("BOX", (0, 0), (-1, -1), 1, colors.black),
        ("INNERGRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]
)


def _get(obj: Any, name: str) -> str:
    value = obj.get(name, "") if isinstance(obj, dict) else getattr(obj, name, "")
    return "" if value is None else str(value)


def _p(text: str, style) -> Paragraph:
    return Paragraph(escape(text), style)


def build_record_pdf(
    record: Any,
    observations: Optional[Iterable[Any]] = None,
    history: Optional[Iterable[Any]] = None,
) -> bytes:
    """Render one client/event record as a PDF sheet and return its bytes."""
    styles = getSampleStyleSheet()
    body = styles["BodyText"]
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, leftMargin=36, rightMargin=36, topMargin=36, bottomMargin=36)
    story = [
        Paragraph(f"<b>{escape(_get(record, 'nombre') or 'Cliente')}</b>", styles["Title"]),
        Paragraph(f"ID: {escape(_get(record, 'id'))}", styles["Normal"]),
        Spacer(1, 12),
    ]
    for title, fields in (
        ("Cliente", CLIENT_FIELDS),
        ("Evento", EVENT_FIELDS),
        ("Seguimiento", META_FIELDS),
    ):
        rows = [[title, ""]] + [
            [FIELD_LABELS.get(f, f), _p(_get(record, f), body)] for f in fields
        ]
        t = Table(rows, hAlign="LEFT", colWidths=[170, 350])
        t.setStyle(_GRID)
        story += [t, Spacer(1, 12)]

    obs = list(observations or [])
    if obs:
        rows = [["Fecha", "Observación"]] + [
            [_get(o, "fecha") or "—", _p(_get(o, "texto"), body)] for o in obs
        ]
        t = Table(rows, hAlign="LEFT", colWidths=[110, 410])
        t.setStyle(_GRID)
        story += [Paragraph("<b>Observaciones</b>", styles["Heading3"]), Spacer(1, 6), t, Spacer(1, 12)]

    hist = list(history or [])
    if hist:
        rows = [["Fecha", "Campo", "Antes", "Después"]] + [
            [
                _get(h, "timestamp"),
                FIELD_LABELS.get(_get(h, "field"), _get(h, "field")),
                _p(_get(h, "oldValue"), body),
                _p(_get(h, "newValue"), body),
            ]
            for h in hist
        ]
        t = Table(rows, hAlign="LEFT", colWidths=[120, 120, 140, 140])
        t.setStyle(_GRID)
        story += [Paragraph("<b>Historial</b>", styles["Heading3"]), Spacer(1, 6), t]

    doc.build(story)
    return buf.getvalue()
