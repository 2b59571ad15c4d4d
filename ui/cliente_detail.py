from typing import Any, Dict, Optional

import streamlit as st

from core.errors import CrmError
from core.i18n import t
from core.settings import get_settings
from core.state import get_client, invalidate_records, lang
from core.workflow import ObservationLog, StatusWorkflow, add_observation
from eventos.models import Cliente
from eventos.presets import OBS_TIPO_RECHAZO
from export.pdf_export import build_record_pdf
from ui.components import estado_badge, render_field_rows, show_error


def find_record(record_id: str) -> Optional[Dict[str, Any]]:
    for r in st.session_state.get("records", []):
        if str(r.get("id", "")) == str(record_id):
            return r
    return None


def _observation_log(cliente: Cliente) -> ObservationLog:
    logs = st.session_state.setdefault("obs_logs", {})
    if cliente.id not in logs:
        logs[cliente.id] = ObservationLog(cliente.observacionesList)
    return logs[cliente.id]


def _status_flow(cliente: Cliente, obs: ObservationLog) -> StatusWorkflow:
    flows = st.session_state.setdefault("status_flows", {})
    if cliente.id not in flows:
        flows[cliente.id] = StatusWorkflow(
            get_client(), cliente.id, cliente.estado, observations=obs, tz=get_settings().timezone
        )
    return flows[cliente.id]


def render_status_actions(flow: StatusWorkflow, key: str) -> None:
    """Approve / reject buttons plus the rejection reason box."""
    lng = lang()
    c1, c2, c3 = st.columns([1, 1, 2])
    busy = flow.is_final
    if c1.button(t("Approved", lng), key=f"{key}_aprobar", disabled=busy or flow.rejecting):
        try:
            flow.approve()
            invalidate_records()
            st.rerun()
        except CrmError as err:
            show_error(err)
    if c2.button(t("Rejected", lng), key=f"{key}_rechazar", disabled=busy):
        try:
            flow.begin_rejection()
            st.rerun()
        except CrmError as err:
            show_error(err)
    c3.markdown(f"{t('Current status', lng)}: {estado_badge(flow.estado)}")

    if flow.rejecting:
        motivo = st.text_area(
            t("Rejection reason", lng),
            key=f"{key}_motivo",
            placeholder="Ej: Cliente canceló por presupuesto / fecha / etc.",
        )
        b1, b2 = st.columns(2)
        if b1.button(t("Confirm rejection", lng), key=f"{key}_confirmar", type="primary"):
            try:
                flow.confirm_rejection(motivo)
                invalidate_records()
                st.rerun()
            except CrmError as err:
                show_error(err)
        if b2.button(t("Cancel", lng), key=f"{key}_cancelar"):
            flow.cancel_rejection()
            st.rerun()


def render_observations(cliente: Cliente, obs: ObservationLog) -> None:
    lng = lang()
    st.subheader(t("Observations", lng))
    if not len(obs):
        st.caption(t("No observations", lng))
    for o in obs.items:
        tag = " · rechazo" if o.tipo == OBS_TIPO_RECHAZO else ""
        st.caption(f"{o.fecha or '—'}{tag}")
        st.markdown(o.texto)
    st.divider()
    with st.form(f"obs_form_{cliente.id}", clear_on_submit=True):
        texto = st.text_area(t("Add new observation", lng), placeholder="Escriba su observación aquí...")
        submitted = st.form_submit_button(t("Add observation", lng))
    if submitted:
        try:
            add_observation(get_client(), cliente.id, obs, texto, tz=get_settings().timezone)
            st.rerun()
        except CrmError as err:
            show_error(err)


def render_history(cliente: Cliente) -> list:
    lng = lang()
    history = st.session_state.setdefault("history", {})
    with st.expander(t("History", lng)):
        if st.button(t("Load history", lng), key=f"hist_{cliente.id}"):
            try:
                history[cliente.id] = get_client().get_audit(cliente.id)
            except CrmError as err:
                show_error(err)
        entries = history.get(cliente.id)
        if entries is not None and not entries:
            st.caption(t("No history", lng))
        for h in entries or []:
            st.caption(f"{h.timestamp} · {h.field}: {h.oldValue or '—'} → {h.newValue or '—'}")
    return history.get(cliente.id) or []


def render_cliente_detail(record_id: str) -> None:
    lng = lang()
    raw = find_record(record_id)
    if raw is None:
        st.error("No se encontró el cliente")
        if st.button(t("Back", lng), key="detail_back_missing"):
            st.session_state["selected_id"] = ""
        return
    cliente = Cliente.model_validate(raw)
    data = cliente.wire_fields()

    if st.button(f"← {t('Back', lng)}", key="detail_back"):
        st.session_state["selected_id"] = ""
        st.rerun()
    st.title(cliente.nombre or "—")
    st.caption(f"ID: {cliente.id}")

    obs = _observation_log(cliente)
    render_status_actions(_status_flow(cliente, obs), key=f"detail_{cliente.id}")

    col1, col2 = st.columns(2)
    with col1:
        st.subheader(t("Contact information", lng))
        render_field_rows(data, ["telefono", "mail", "lugar"])
        st.subheader(t("Commercial information", lng))
        render_field_rows(data, ["vendedorComercialAsignado", "asignacionComercialMail", "sector"])
    with col2:
        st.subheader(t("Event details", lng))
        render_field_rows(data, ["fechaEvento", "cantidadPersonas"])
        st.markdown("**Horario**")
        st.caption(f"{cliente.horarioInicioEvento or '—'} - {cliente.horarioFinalizacionEvento or '—'}")
        st.subheader(t("Budget and status", lng))
        render_field_rows(data, ["presupuesto", "fechaPresupEnviado", "demora"])

    st.subheader(t("Additional information", lng))
    a1, a2 = st.columns(2)
    with a1:
        render_field_rows(data, ["canal", "observacion", "respuestaViaMail"])
    with a2:
        render_field_rows(data, ["marcaTemporal", "fechaCliente", "horaCliente"])

    render_observations(cliente, obs)
    history = render_history(cliente)
    st.download_button(
        t("Download PDF", lng),
        data=build_record_pdf(data, obs.items, history),
        file_name=f"cliente_{cliente.id}.pdf",
        mime="application/pdf",
        key=f"pdf_{cliente.id}",
    )
