"""In-memory filtering and ordering of the clients table."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping

ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
DMY_DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")


def to_iso_date(value: Any) -> str:
    """Accept ``YYYY-MM-DD`` or ``DD/MM/YYYY``; anything else is ``""``."""
    if not value:
        return ""
    s = str(value).strip()
    if ISO_DATE_RE.fullmatch(s):
        return s
    m = DMY_DATE_RE.fullmatch(s)
    if m:
        dd, mm, yyyy = m.groups()
        return f"{yyyy}-{mm.zfill(2)}-{dd.zfill(2)}"
    return ""


def month_key(value: Any) -> str:
    iso = to_iso_date(value)
    return iso[:7] if iso else ""


def id_to_number(value: Any) -> float:
    """Numeric id for ordering; ids that are not finite numbers rank last."""
    try:
        n = float(str(value).strip())
    except (TypeError, ValueError):
        return -math.inf
    return n if math.isfinite(n) else -math.inf


def _as_dict(record: Any) -> Mapping[str, Any]:
    if hasattr(record, "model_dump"):
        return record.model_dump()
    return record


def _assignee(rec: Mapping[str, Any]) -> str:
    return str(rec.get("vendedorComercialAsignado") or rec.get("comercial") or "")


def _text_values(value: Any) -> Iterable[str]:
    if isinstance(value, dict):
        for v in value.values():
            yield from _text_values(v)
    elif isinstance(value, (list, tuple)):
        for v in value:
            yield from _text_values(v)
    elif value is not None:
        yield str(value)


@dataclass(frozen=True)
class FilterState:
    fecha_desde: str = ""
    fecha_hasta: str = ""
    estado: str = ""
    comercial: str = ""
    mes: str = ""
    local: str = ""
    busqueda: str = ""

    @property
    def is_active(self) -> bool:
        return any(
            (self.fecha_desde, self.fecha_hasta, self.estado, self.comercial,
             self.mes, self.local, self.busqueda)
        )


@dataclass
class FilterOptions:
    estados: List[str] = field(default_factory=list)
    comerciales: List[str] = field(default_factory=list)
    meses: List[str] = field(default_factory=list)
    locales: List[str] = field(default_factory=list)


def filter_options(records: Iterable[Any]) -> FilterOptions:
    """Dropdown choices, always taken from the full unfiltered collection."""
    estados, comerciales, meses, locales = set(), set(), set(), set()
    for r in records:
        rec = _as_dict(r)
        if rec.get("estado"):
            estados.add(str(rec["estado"]))
        vend = _assignee(rec)
        if vend:
            comerciales.add(vend)
        mk = month_key(rec.get("fechaEvento"))
        if mk:
            meses.add(mk)
        if rec.get("lugar"):
            locales.add(str(rec["lugar"]))
    return FilterOptions(
        estados=sorted(estados),
        comerciales=sorted(comerciales),
        meses=sorted(meses, reverse=True),
        locales=sorted(locales),
    )


def matches(record: Any, state: FilterState) -> bool:
    rec = _as_dict(record)

    iso = to_iso_date(rec.get("fechaEvento"))
    if state.fecha_desde and (not iso or iso < state.fecha_desde):
        return False
    if state.fecha_hasta and (not iso or iso > state.fecha_hasta):
        return False

    if state.estado and str(rec.get("estado") or "") != state.estado:
        return False
    if state.comercial and _assignee(rec) != state.comercial:
        return False
    if state.mes and month_key(rec.get("fechaEvento")) != state.mes:
        return False
    if state.local and str(rec.get("lugar") or "") != state.local:
        return False

    if state.busqueda:
        needle = state.busqueda.lower()
        if not any(needle in v.lower() for v in _text_values(rec)):
            return False
    return True


def filter_records(records: Iterable[Any], state: FilterState) -> List[Any]:
    return [r for r in records if matches(r, state)]


def sort_by_id_desc(records: Iterable[Any]) -> List[Any]:
    return sorted(records, key=lambda r: id_to_number(_as_dict(r).get("id")), reverse=True)


def apply_filters(records: Iterable[Any], state: FilterState) -> List[Any]:
    """Filter, then order newest id first. A full pass on every call."""
    return sort_by_id_desc(filter_records(records, state))


def describe_filters(state: FilterState, shown: int, total: int) -> str:
    parts = [f"Mostrando {shown} de {total} clientes"]
    if state.busqueda:
        parts.append(f'Búsqueda: "{state.busqueda}"')
    if state.fecha_desde or state.fecha_hasta:
        parts.append(f"Fecha: {state.fecha_desde or '—'} → {state.fecha_hasta or '—'}")
    if state.estado:
        parts.append(f"Estado: {state.estado}")
    if state.comercial:
        parts.append(f"Comercial: {state.comercial}")
    if state.mes:
        parts.append(f"Mes: {state.mes}")
    if state.local:
        parts.append(f"Local: {state.local}")
    return " · ".join(parts)
