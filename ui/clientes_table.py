import logging
from datetime import date
from typing import List, Optional

import streamlit as st

from core.errors import CrmError
from core.filters import FilterState, apply_filters, describe_filters, filter_options
from core.i18n import t
from core.state import get_client, lang
from export.csv_export import records_frame, records_to_csv_bytes

logger = logging.getLogger(__name__)


def _iso(value: Optional[date]) -> str:
    return value.isoformat() if value else ""


def load_records() -> List[dict]:
    """Fetch the full collection once per session (or after a reload)."""
    if not st.session_state.get("records_loaded"):
        try:
            records = get_client().list_records()
        except CrmError as err:
            logger.error("Loading records failed: %s", err)
            st.session_state["load_error"] = err.message
            st.session_state["records"] = []
        else:
            st.session_state["records"] = [r.model_dump() for r in records]
            st.session_state["load_error"] = ""
        st.session_state["records_loaded"] = True
    return st.session_state["records"]


def render_filters(records: List[dict]) -> FilterState:
    lng = lang()
    opciones = filter_options(records)

    def todos(v: str) -> str:
        return v or t("All", lng)

    c = st.columns(6)
    desde = c[0].date_input(t("From", lng), value=None, key="f_desde", format="YYYY-MM-DD")
    hasta = c[1].date_input(t("To", lng), value=None, key="f_hasta", format="YYYY-MM-DD")
    estado = c[2].selectbox(t("Status", lng), [""] + opciones.estados, format_func=todos, key="f_estado")
    comercial = c[3].selectbox(t("Sales rep", lng), [""] + opciones.comerciales, format_func=todos, key="f_comercial")
    mes = c[4].selectbox(t("Month", lng), [""] + opciones.meses, format_func=todos, key="f_mes")
    local = c[5].selectbox(t("Venue", lng), [""] + opciones.locales, format_func=todos, key="f_local")
    busqueda = st.text_input(
        t("Search", lng), placeholder=t("Search clients...", lng), key="f_busqueda", label_visibility="collapsed"
    )

    state = FilterState(
        fecha_desde=_iso(desde),
        fecha_hasta=_iso(hasta),
        estado=estado or "",
        comercial=comercial or "",
        mes=mes or "",
        local=local or "",
        busqueda=busqueda or "",
    )
    st.session_state["filters"] = state
    return state


def render_clientes_table() -> Optional[str]:
    """Clients list with filters; returns the id chosen to open, if any."""
    lng = lang()
    st.header(t("Client management", lng))
    records = load_records()
    if st.session_state.get("load_error"):
        st.error(st.session_state["load_error"])

    state = render_filters(records)
    ordered = apply_filters(records, state)

    st.dataframe(records_frame(ordered), use_container_width=True, hide_index=True)
    st.caption(describe_filters(state, len(ordered), len(records)))

    c1, c2, c3 = st.columns([3, 1, 1])
    ids = [str(r.get("id", "")) for r in ordered]
    names = {str(r.get("id", "")): r.get("nombre", "") for r in ordered}
    pick = c1.selectbox(
        t("Open client", lng),
        [""] + ids,
        format_func=lambda i: f"{i} — {names.get(i, '')}" if i else "—",
        key="pick_cliente",
    )
    c3.download_button(
        t("Download CSV", lng),
        data=records_to_csv_bytes(ordered),
        file_name="clientes.csv",
        mime="text/csv",
    )
    if c2.button(t("Open client", lng), key="open_cliente", disabled=not pick):
        st.session_state["selected_id"] = pick
        return pick
    return None
