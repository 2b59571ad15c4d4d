"""Data-entry form: look a client up by id and complete the missing fields."""
import streamlit as st

from core.errors import CrmError, NothingToSaveError, SubmitLockedError
from core.i18n import t
from core.state import get_client, invalidate_records, lang
from core.workflow import EditSession
from eventos.presets import CARGA_FIELDS, FIELD_LABELS, TIME_FIELDS, LockPolicy, StatusPolicy
from ui.cliente_detail import render_status_actions
from ui.components import show_error

PLACEHOLDERS = {
    "horarioInicioEvento": "HH:MM",
    "horarioFinalizacionEvento": "HH:MM",
    "sector": "Ej: Corporativo, Social, Cultural",
    "vendedorComercialAsignado": "Nombre del comercial",
    "presupuesto": "Monto / referencia",
}


def get_edit_session() -> EditSession:
    ss = st.session_state
    if "carga_session" not in ss:
        ss["carga_session"] = EditSession(get_client(), CARGA_FIELDS, cooldown=ss.get("submit_cooldown"))
    session = ss["carga_session"]
    session.lock_policy = LockPolicy(ss.get("lock_policy", LockPolicy.FILL_EMPTY_ONLY.value))
    session.status_policy = StatusPolicy(ss.get("status_policy", StatusPolicy.ON_BUDGET_FILLED.value))
    return session


def _lookup(session: EditSession, record_id: str) -> None:
    try:
        session.load(record_id)
        st.session_state["carga_error"] = ""
    except CrmError as err:
        st.session_state["carga_error"] = err.message


def render_carga_form() -> None:
    lng = lang()
    session = get_edit_session()
    st.header(t("Data entry", lng))
    st.caption(
        "Ingresá el ID Cliente. Si existe, se completan los campos. "
        "Sólo podrás agregar en los campos vacíos."
        if session.lock_policy is LockPolicy.FILL_EMPTY_ONLY
        else "Ingresá el ID Cliente para editar sus datos."
    )

    from_query = st.query_params.get("id", "")
    if from_query and st.session_state.get("carga_query_loaded") != from_query:
        st.session_state["carga_query_loaded"] = from_query
        st.session_state["carga_id"] = from_query
        _lookup(session, from_query)

    c1, c2 = st.columns([3, 1])
    record_id = c1.text_input(t("Client ID", lng), key="carga_id", placeholder="Ej: 1")
    if c2.button(t("Search", lng), key="carga_buscar"):
        _lookup(session, record_id)
    if st.session_state.get("carga_error"):
        st.error(st.session_state["carga_error"])

    if session.loaded and session.status is not None:
        render_status_actions(session.status, key=f"carga_{session.record_id}")

    locked = session.locked
    with st.form("carga_form"):
        values = {}
        for f in CARGA_FIELDS:
            values[f] = st.text_input(
                FIELD_LABELS[f],
                value=session.form.get(f, ""),
                key=f"carga_{session.record_id}_{f}",
                placeholder=PLACEHOLDERS.get(f, ""),
                disabled=locked.get(f, False) or not session.loaded,
            )
            if locked.get(f):
                st.caption(t("This value already exists and cannot be edited.", lng))
            elif f in TIME_FIELDS:
                st.caption("Formato 24 h, por ejemplo 20:30")
        submitted = st.form_submit_button(t("Save", lng), use_container_width=True)
    st.caption(
        "Al guardar: si cargás horarios, se registra la marca temporal. "
        "Si cargás presupuesto, se registra la fecha de envío del presupuesto."
    )

    if submitted:
        for f, v in values.items():
            if not locked.get(f) and f in session.form:
                session.form[f] = v
        try:
            diff = session.submit()
        except NothingToSaveError as err:
            st.warning(err.message)
        except SubmitLockedError as err:
            st.warning(f"{err.message} ({session.cooldown.remaining():.0f} s)")
        except CrmError as err:
            show_error(err)
        else:
            invalidate_records()
            st.success(t("Data saved", lng))
            for line in diff.describe():
                st.caption(line)
