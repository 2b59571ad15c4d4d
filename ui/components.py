from typing import Any, Iterable, Mapping

import streamlit as st

from core.errors import CrmError
from core.validation import Issue
from eventos.presets import (
    ESTADO_APROBADO,
    ESTADO_ASIGNADO,
    ESTADO_PENDIENTE,
    ESTADO_PRESUPUESTO_EN_REVISION,
    ESTADO_RECHAZADO,
    FIELD_LABELS,
)

_BADGE_COLORS = {
    ESTADO_APROBADO: "green",
    ESTADO_RECHAZADO: "red",
    ESTADO_ASIGNADO: "blue",
    ESTADO_PENDIENTE: "blue",
    ESTADO_PRESUPUESTO_EN_REVISION: "orange",
}


def estado_badge(estado: str) -> str:
    """Markdown badge for a status value."""
    value = (estado or "").strip()
    color = _BADGE_COLORS.get(value.upper(), "gray")
    return f":{color}-background[{value or '—'}]"


def render_field_rows(record: Mapping[str, Any], fields: Iterable[str]) -> None:
    for f in fields:
        value = record.get(f, "")
        st.markdown(f"**{FIELD_LABELS.get(f, f)}**")
        st.caption(str(value) if value not in (None, "") else "—")


def render_issues(issues: Iterable[Issue]) -> None:
    for r in issues:
        if r.severity == "critical":
            st.error(f"[{r.code}] {r.message}")
        elif r.severity == "warn":
            st.warning(f"[{r.code}] {r.message}")
        else:
            st.info(f"[{r.code}] {r.message}")


def show_error(err: CrmError) -> None:
    st.error(err.message)
