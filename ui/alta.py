import streamlit as st

from core.errors import CrmError, RecordValidationError
from core.i18n import t
from core.state import get_client, invalidate_records, lang
from core.validation import validate_record
from core.workflow import create_record
from eventos.presets import CLIENT_FIELDS, EVENT_FIELDS, FIELD_LABELS
from ui.components import render_issues, show_error

ALTA_FIELDS = CLIENT_FIELDS + EVENT_FIELDS


def render_alta_form() -> None:
    """New client form. The sheet assigns the id."""
    lng = lang()
    st.header(t("New client", lng))
    with st.form("alta_form", clear_on_submit=False):
        values = {}
        cols = st.columns(2)
        for idx, f in enumerate(ALTA_FIELDS):
            with cols[idx % 2]:
                if f == "cantidadPersonas":
                    values[f] = st.number_input(FIELD_LABELS[f], min_value=0, step=1, key=f"alta_{f}")
                elif f == "observacion":
                    values[f] = st.text_area(FIELD_LABELS[f], key=f"alta_{f}")
                else:
                    values[f] = st.text_input(FIELD_LABELS[f], key=f"alta_{f}")
        submitted = st.form_submit_button(t("Create", lng))

    if submitted:
        try:
            body, issues = create_record(get_client(), values)
        except RecordValidationError:
            render_issues(validate_record(values, creating=True))
        except CrmError as err:
            show_error(err)
        else:
            render_issues(issues)
            new_id = (body.get("data") or {}).get("id", "") if isinstance(body.get("data"), dict) else ""
            st.success(body.get("message") or (f"Cliente creado (ID {new_id})" if new_id else "Cliente creado"))
            invalidate_records()
