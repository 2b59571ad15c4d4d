import streamlit as st

from core import state
from core.filters import FilterState
from core.workflow import SubmitCooldown


def test_init_state_seeds_defaults():
    st.session_state.clear()
    state.init_state()
    assert st.session_state["view_mode"] == "clientes"
    assert st.session_state["records"] == []
    assert st.session_state["filters"] == FilterState()
    assert st.session_state["lock_policy"] == "fill_empty_only"
    assert st.session_state["status_policy"] == "on_budget_filled"
    assert isinstance(st.session_state["submit_cooldown"], SubmitCooldown)


def test_init_state_keeps_existing_values():
    st.session_state.clear()
    st.session_state["view_mode"] = "carga"
    st.session_state["records"] = [{"id": "1"}]
    state.init_state()
    assert st.session_state["view_mode"] == "carga"
    assert st.session_state["records"] == [{"id": "1"}]


def test_invalidate_records():
    st.session_state.clear()
    st.session_state["records_loaded"] = True
    state.invalidate_records()
    assert st.session_state["records_loaded"] is False
