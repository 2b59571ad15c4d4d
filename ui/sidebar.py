import streamlit as st

from core.i18n import t
from core.state import invalidate_records, lang
from eventos.presets import LockPolicy, StatusPolicy

LOCK_LABELS = {
    LockPolicy.OPEN.value: "Edición libre",
    LockPolicy.FILL_EMPTY_ONLY.value: "Sólo completar campos vacíos",
}
STATUS_LABELS = {
    StatusPolicy.MANUAL.value: "Manual",
    StatusPolicy.SERVER.value: "Calculado por el servidor",
    StatusPolicy.ON_BUDGET_FILLED.value: "Al cargar presupuesto",
    StatusPolicy.ON_BUDGET_CHANGED.value: "Al cambiar presupuesto",
}


def render_policy_sidebar() -> None:
    """Sidebar with the session's edit policies."""
    lng = lang()
    st.sidebar.header(t("Settings", lng))
    st.sidebar.selectbox(
        t("Lock policy", lng),
        list(LOCK_LABELS),
        format_func=LOCK_LABELS.get,
        key="lock_policy",
    )
    st.sidebar.selectbox(
        t("Status policy", lng),
        list(STATUS_LABELS),
        format_func=STATUS_LABELS.get,
        key="status_policy",
    )
    if st.sidebar.button(t("Reload", lng), key="reload_records"):
        invalidate_records()
