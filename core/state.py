"""Session state defaults.

Everything lives in ``st.session_state`` for the browser session only.
Records, filters and edit sessions are never written to disk.
"""
from typing import Any

import streamlit as st

from core.api import EventSheetClient
from core.filters import FilterState
from core.settings import get_settings
from core.workflow import SubmitCooldown


def init_state() -> None:
    """Seed defaults without overwriting keys that already exist."""
    settings = get_settings()
    ss = st.session_state
    ss.setdefault("view_mode", "clientes")
    ss.setdefault("records", [])
    ss.setdefault("records_loaded", False)
    ss.setdefault("load_error", "")
    ss.setdefault("selected_id", "")
    ss.setdefault("filters", FilterState())
    ss.setdefault("lock_policy", settings.lock_policy.value)
    ss.setdefault("status_policy", settings.status_policy.value)
    ss.setdefault("ui_prefs", {"language": settings.language})
    ss.setdefault("submit_cooldown", SubmitCooldown(settings.submit_cooldown_seconds))


def get_client() -> Any:
    """Session-scoped API client."""
    if "api_client" not in st.session_state:
        settings = get_settings()
        st.session_state["api_client"] = EventSheetClient(
            settings.api_base_url, timeout=settings.request_timeout
        )
    return st.session_state["api_client"]


def lang() -> str:
    return st.session_state.get("ui_prefs", {}).get("language", "es")


def invalidate_records() -> None:
    """Force the clients table to re-fetch on the next run."""
    st.session_state["records_loaded"] = False
