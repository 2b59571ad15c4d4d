import streamlit as st

from core.log_config import setup_logging
from core.settings import get_settings
from core.state import init_state
from ui.alta import render_alta_form
from ui.carga import render_carga_form
from ui.cliente_detail import render_cliente_detail
from ui.clientes_table import render_clientes_table
from ui.sidebar import render_policy_sidebar
from ui.topbar import render_topbar

settings = get_settings()
st.set_page_config(page_title=settings.app_title, layout="wide")
setup_logging()
init_state()

# Deep links: ?id=<n> opens the data-entry form for that client.
if st.query_params.get("id") and "deep_link_seen" not in st.session_state:
    st.session_state["deep_link_seen"] = True
    st.session_state["view_mode"] = "carga"

render_policy_sidebar()
view = render_topbar()

if view == "clientes":
    if st.session_state.get("selected_id"):
        render_cliente_detail(st.session_state["selected_id"])
    elif render_clientes_table():
        st.rerun()
elif view == "carga":
    render_carga_form()
elif view == "alta":
    render_alta_form()
