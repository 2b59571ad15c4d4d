from __future__ import annotations

import re
from typing import Any, Dict, List, Literal, Mapping

from pydantic import BaseModel, Field

from core.diff import normalize_time
from core.filters import to_iso_date
from eventos.presets import FIELD_LABELS, TIME_FIELDS

MAIL_RE = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")


class Issue(BaseModel):
    code: str
    severity: Literal["info", "warn", "critical"]
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)


def _text(fields: Mapping[str, Any], name: str) -> str:
    value = fields.get(name)
    return "" if value is None else str(value).strip()


def validate_record(fields: Mapping[str, Any], creating: bool = False) -> List[Issue]:
    res: List[Issue] = []

    if creating and not _text(fields, "nombre"):
        res.append(
            Issue(
                code="NOMBRE_REQUIRED",
                severity="critical",
                message="El nombre es obligatorio.",
            )
        )

    mail = _text(fields, "mail")
    if mail and not MAIL_RE.fullmatch(mail):
        res.append(
            Issue(
                code="MAIL_FORMAT",
                severity="warn",
                message="El email no parece válido.",
                context={"mail": mail},
            )
        )

    personas = _text(fields, "cantidadPersonas")
    if personas:
        try:
            negative = float(personas) < 0
        except ValueError:
            negative = False
            res.append(
                Issue(
                    code="HEADCOUNT_FORMAT",
                    severity="warn",
                    message="La cantidad de personas no es un número.",
                    context={"value": personas},
                )
            )
        if negative:
            res.append(
                Issue(
                    code="HEADCOUNT_NEGATIVE",
                    severity="warn",
                    message="La cantidad de personas no puede ser negativa.",
                )
            )

    for name in sorted(TIME_FIELDS):
        raw = _text(fields, name)
        if raw and not normalize_time(raw):
            res.append(
                Issue(
                    code="TIME_FORMAT",
                    severity="warn",
                    message=f"{FIELD_LABELS[name]}: usar formato HH:MM (24 h).",
                    context={"field": name, "value": raw},
                )
            )

    inicio = normalize_time(fields.get("horarioInicioEvento"))
    fin = normalize_time(fields.get("horarioFinalizacionEvento"))
    if inicio and fin and fin <= inicio:
        res.append(
            Issue(
                code="TIME_RANGE",
                severity="warn",
                message="El horario de finalización es anterior al de inicio.",
                context={"inicio": inicio, "fin": fin},
            )
        )

    fecha = _text(fields, "fechaEvento")
    if fecha and not to_iso_date(fecha):
        res.append(
            Issue(
                code="FECHA_EVENTO_FORMAT",
                severity="warn",
                message="Fecha del evento: usar AAAA-MM-DD o DD/MM/AAAA.",
                context={"value": fecha},
            )
        )

    return res


def has_blocking(res: List[Issue]) -> bool:
    return any(r.severity == "critical" for r in res)
