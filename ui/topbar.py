import streamlit as st

from core.i18n import available_languages, t
from core.state import lang
from core.version import __version__

VIEWS = ["clientes", "carga", "alta"]
VIEW_LABELS = {"clientes": "Clients", "carga": "Data entry", "alta": "New client"}


def render_topbar() -> str:
    """Render the top bar and return the selected view."""
    lng = lang()
    languages = available_languages()
    left, center, right = st.columns([1, 3, 1])
    with left:
        st.markdown(f"**eventos-crm v{__version__}**")
    with center:
        view_mode = st.radio(
            t("View", lng),
            VIEWS,
            format_func=lambda v: t(VIEW_LABELS[v], lng),
            horizontal=True,
            key="view_mode",
        )
    with right:
        prefs = st.session_state.setdefault("ui_prefs", {})
        prefs["language"] = st.selectbox(
            t("Lang", lng),
            languages,
            key="ui_lang",
            index=languages.index(lng) if lng in languages else 0,
        )
    return view_mode
