# dashboard/views/settings.py
from __future__ import annotations
import logging
from typing import Optional

import pandas as pd
import streamlit as st

from garage.config import get_settings
from garage.models import Location, LocationFilters, LocationInput, LocationUpdate
from garage.utils.common import paginate

from dashboard.hooks.base import error_message
from dashboard.lib import session
from dashboard.views.placeholders import coming_soon
from dashboard.widgets.core import format_date_series, kpi_card, locations_frame, selected_item, table_key

log = logging.getLogger(__name__)

PAGE_KEY = "loc_page"
PAGE_SIZE = 10
STATUS_CHOICES = {"All": None, "Active": True, "Inactive": False}
FORM_FIELDS = ("name", "address", "capacity", "description", "active")


# ─────────────────────────────
# General
# ─────────────────────────────
def _general_tab():
    settings = get_settings()
    identity = session.identity()
    st.subheader("General")
    st.text_input("Signed in as", value=(identity.email if identity else ""), disabled=True)
    st.text_input("Time zone", value=settings.APP_TIMEZONE, disabled=True)
    st.text_input("Site URL", value=settings.SITE_URL, disabled=True)
    if st.button("🔄 Refresh data", key="settings_refresh"):
        session.cache().invalidate()
        st.toast("Data will be reloaded.", icon="🔄")


# ─────────────────────────────
# Location dialogs
# ─────────────────────────────
def _location_fields(prefix: str, current: Optional[Location] = None) -> dict:
    return {
        "name": st.text_input("Name *", value=current.name if current else "", key=f"{prefix}_name"),
        "address": st.text_input("Address", value=(current.address or "") if current else "", key=f"{prefix}_address"),
        "capacity": st.number_input(
            "Capacity", min_value=0, step=1,
            value=(current.capacity or 0) if current else 0, key=f"{prefix}_capacity",
            help="Leave at 0 if unknown",
        ),
        "description": st.text_area(
            "Description", value=(current.description or "") if current else "", key=f"{prefix}_description",
        ),
        "is_active": st.toggle("Active", value=current.is_active if current else True, key=f"{prefix}_active"),
    }


@st.dialog("Add location")
def add_location_dialog():
    hooks = session.location_hooks()
    values = _location_fields("add_location")
    if st.button("Create location", type="primary", key="add_location_submit"):
        if not values["name"].strip():
            st.error("Location name is required")
            return
        if session.submit(
            lambda: hooks.create_location(LocationInput(**values), session.identity()),
            doing="creating the location",
        ):
            session.clear_form_state(st.session_state, "add_location", FORM_FIELDS)
            st.rerun()


@st.dialog("Edit location")
def edit_location_dialog(location: Location):
    hooks = session.location_hooks()
    prefix = f"edit_location_{location.id}"
    values = _location_fields(prefix, location)
    if st.button("Save changes", type="primary", key=f"{prefix}_submit"):
        if not values["name"].strip():
            st.error("Location name is required")
            return
        if session.submit(
            lambda: hooks.update_location(location.id, LocationUpdate(**values)),
            doing="updating the location",
        ):
            session.clear_form_state(st.session_state, prefix, FORM_FIELDS)
            st.rerun()


@st.dialog("Delete location")
def delete_location_dialog(location: Location):
    hooks = session.location_hooks()
    st.write(f"Delete **{location.name}**? This cannot be undone.")
    st.caption('Its attendance reports are kept and will show as "Unknown Location".')
    c1, c2 = st.columns(2)
    if c1.button("Delete", type="primary", key="delete_location_confirm"):
        if session.submit(lambda: hooks.delete_location(location.id), doing="deleting the location"):
            st.rerun()
    if c2.button("Cancel", key="delete_location_cancel"):
        st.rerun()


# ─────────────────────────────
# Usage panel
# ─────────────────────────────
def _usage_panel(location: Location):
    hooks = session.location_hooks()
    st.markdown(f"#### Usage · {location.name}")
    try:
        stats = hooks.usage_stats(location.id)
    except Exception as exc:
        log.error("Could not load usage for %s", location.id, exc_info=True)
        st.error(error_message(exc, "Failed to load usage"))
        return

    c1, c2, c3, c4 = st.columns(4)
    with c1:
        kpi_card("Reports", stats.total_reports)
    with c2:
        kpi_card("Total attendance", stats.total_attendance)
    with c3:
        kpi_card("Average", stats.average_attendance)
    with c4:
        last = stats.last_used
        st.metric("Last used", f"{last:%b} {last.day}, {last.year}" if last else "Never")

    if stats.reports:
        recent = pd.DataFrame([r.model_dump() for r in stats.reports])
        recent["date"] = format_date_series(recent["date"])
        st.dataframe(
            recent.rename(columns={"date": "Date", "total_attendance": "Total"}),
            hide_index=True,
            width="stretch",
        )
    else:
        st.caption("No attendance reports at this location yet.")


# ─────────────────────────────
# Locations tab
# ─────────────────────────────
def _locations_tab():
    hooks = session.location_hooks()
    reset = session.reset_page(PAGE_KEY)

    head, action = st.columns([4, 1])
    with head:
        st.subheader("Locations")
    with action:
        if st.button("➕ Add location", type="primary", key="loc_add"):
            add_location_dialog()

    c1, c2 = st.columns([3, 1])
    with c1:
        search = st.text_input("Search", placeholder="Type at least 2 characters", key="loc_search", on_change=reset)
    with c2:
        status = st.selectbox("Status", list(STATUS_CHOICES), key="loc_status", on_change=reset)

    term = search.strip()
    filters = LocationFilters(
        search=term if len(term) >= 2 else None,
        is_active=STATUS_CHOICES[status],
    )
    try:
        locations = hooks.locations(filters)
    except Exception as exc:
        log.error("Could not load locations", exc_info=True)
        st.error(error_message(exc, "Failed to load locations"))
        return

    if not locations:
        st.info("No locations found." if filters.search else "No locations yet. Add your first location to get started!")
        return

    page = paginate(locations, st.session_state.get(PAGE_KEY, 1), PAGE_SIZE)
    st.session_state[PAGE_KEY] = page.page

    event = st.dataframe(
        locations_frame(page.items),
        hide_index=True,
        width="stretch",
        on_select="rerun",
        selection_mode="single-row",
        key=table_key("loc_table", page.items),
    )

    p1, p2, p3 = st.columns([1, 3, 1])
    with p1:
        if st.button("◀ Previous", disabled=page.page <= 1, key="loc_prev"):
            st.session_state[PAGE_KEY] = page.page - 1
            st.rerun()
    with p2:
        st.caption(f"{page.label} · page {page.page} of {page.total_pages}")
    with p3:
        if st.button("Next ▶", disabled=page.page >= page.total_pages, key="loc_next"):
            st.session_state[PAGE_KEY] = page.page + 1
            st.rerun()

    picked = selected_item(page.items, event.selection.rows if event else [])
    if picked is None:
        st.caption("Select a location to edit it or see its usage.")
        return

    a1, a2, _ = st.columns([1, 1, 4])
    if a1.button("✏️ Edit", key="loc_edit"):
        # Start from the stored values, not a draft left by a dismissed dialog
        session.clear_form_state(st.session_state, f"edit_location_{picked.id}", FORM_FIELDS)
        edit_location_dialog(picked)
    if a2.button("🗑️ Delete", key="loc_delete"):
        delete_location_dialog(picked)
    _usage_panel(picked)


# ─────────────────────────────
# Page
# ─────────────────────────────
def settings_page():
    st.title("⚙️ Settings")
    general, locations, users, data = st.tabs(["General", "Locations", "Users", "Data"])
    with general:
        _general_tab()
    with locations:
        _locations_tab()
    with users:
        coming_soon("Users", "Invite teammates and manage roles.")
    with data:
        coming_soon("Data", "Import and export attendance history.")
