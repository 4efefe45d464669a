# dashboard/lib/session.py
"""
Per-browser-session objects. Streamlit runs every session's script in its own
thread; each session gets its own Supabase client (which holds the auth
session) and its own query cache, both kept in st.session_state.
"""
from __future__ import annotations
import logging
from typing import Callable, Iterable, MutableMapping, Optional

import streamlit as st
from pydantic import ValidationError

from garage import auth
from garage.db import get_client
from garage.services.attendance import AttendanceService
from garage.services.locations import LocationService

from dashboard.hooks.attendance import AttendanceHooks
from dashboard.hooks.base import MINUTE, MutationError
from dashboard.hooks.locations import LocationHooks
from .cache import QueryCache

log = logging.getLogger(__name__)

# Past the longest freshness window (15 min), so pruned entries would refetch anyway
CACHE_MAX_AGE = 30 * MINUTE


class ToastNotifier:
    def success(self, message: str) -> None:
        st.toast(message, icon="✅")

    def error(self, message: str) -> None:
        st.toast(message, icon="❌")


def client():
    if "sb" not in st.session_state:
        st.session_state["sb"] = get_client()
    return st.session_state["sb"]


def cache() -> QueryCache:
    if "query_cache" not in st.session_state:
        st.session_state["query_cache"] = QueryCache()
    qc = st.session_state["query_cache"]
    # Filter combinations come and go; forget the ones nobody has read lately
    qc.prune(CACHE_MAX_AGE)
    return qc


def attendance_hooks() -> AttendanceHooks:
    return AttendanceHooks(AttendanceService(client()), cache(), ToastNotifier())


def location_hooks() -> LocationHooks:
    return LocationHooks(LocationService(client()), cache(), ToastNotifier())


def identity() -> Optional[auth.Identity]:
    return auth.current_identity(client())


def forget_session() -> None:
    """Drop cached data tied to the signed-in user."""
    st.session_state.pop("query_cache", None)


def reset_page(page_key: str) -> Callable[[], None]:
    """on_change callback: any filter change sends its table back to page 1."""
    def _reset():
        st.session_state[page_key] = 1
    return _reset


def clear_form_state(state: MutableMapping, prefix: str, fields: Iterable[str]) -> None:
    """Drop the widget values of one form so it next renders from its defaults."""
    for field in fields:
        state.pop(f"{prefix}_{field}", None)

# ─────────────────────────────
# Form boundary
# ─────────────────────────────
def first_validation_message(exc: ValidationError) -> str:
    err = exc.errors()[0]
    field = ".".join(str(p) for p in err.get("loc", ()))
    msg = err.get("msg", "Invalid value")
    return f"{field}: {msg}" if field else msg


def submit(action: Callable[[], object], *, doing: str) -> bool:
    """
    Run a form action. True on success; on failure the dialog stays open:
    bad input shows inline, store errors were already announced by the hook,
    anything else is logged and reported as unexpected.
    """
    try:
        action()
    except ValidationError as exc:
        st.error(first_validation_message(exc))
        return False
    except MutationError:
        return False
    except Exception:
        log.exception("Unexpected error while %s", doing)
        st.toast(f"An unexpected error occurred while {doing}. Please try again.", icon="❌")
        return False
    return True
