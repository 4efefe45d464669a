# dashboard/views/dashboard.py
from __future__ import annotations
import logging
from typing import Dict, List, Optional

import streamlit as st

from garage.models import (
    COUNTER_FIELDS,
    TIERS,
    AttendanceReport,
    AttendanceReportInput,
    AttendanceReportUpdate,
    LocationInput,
    ReportFilters,
)
from garage.utils.common import describe_range, paginate, resolve_date_range, today_local

from dashboard.hooks.base import error_message
from dashboard.lib import session
from dashboard.widgets.core import (
    CATEGORY_LABELS,
    category_chart,
    metric_cards,
    reports_frame,
    selected_item,
    style_tiers,
    table_key,
)

log = logging.getLogger(__name__)

PAGE_KEY = "dash_page"
PAGE_SIZES = (5, 10, 15)
EMPTY_TEXT = "No attendance reports found. Create your first report to get started!"

DATE_FILTER_LABELS = {
    "all": "All time",
    "this-week": "This week",
    "last-week": "Last week",
    "this-month": "This month",
    "last-month": "Last month",
    "custom-range": "Custom range",
}


# ─────────────────────────────
# Filters
# ─────────────────────────────
def _filters_bar() -> ReportFilters:
    reset = session.reset_page(PAGE_KEY)
    c1, c2, c3 = st.columns([2, 2, 3])
    with c1:
        date_filter = st.selectbox(
            "Date", list(DATE_FILTER_LABELS), format_func=DATE_FILTER_LABELS.get,
            key="dash_date_filter", on_change=reset,
        )
    with c2:
        tier_filter = st.selectbox(
            "Tier", ["all", *TIERS], format_func=lambda t: "All tiers" if t == "all" else t.title(),
            key="dash_tier_filter", on_change=reset,
        )
    custom_from = custom_to = None
    with c3:
        if date_filter == "custom-range":
            picked = st.date_input("Range", value=(), key="dash_custom_range", on_change=reset)
            if isinstance(picked, (list, tuple)) and len(picked) == 2:
                custom_from, custom_to = picked
        else:
            window = resolve_date_range(date_filter)
            st.caption(f"Showing: **{describe_range(window)}**")
    return ReportFilters(date_filter, custom_from, custom_to, tier_filter)


# ─────────────────────────────
# Report form (shared by add/edit)
# ─────────────────────────────
def _location_picker(prefix: str, current: Optional[AttendanceReport] = None) -> Optional[str]:
    loc_hooks = session.location_hooks()
    select_key = f"{prefix}_location"

    # Quick-add runs before the select box so the new id can be preselected.
    with st.expander("➕ Add a new location"):
        new_name = st.text_input("New location name", key=f"{prefix}_new_location")
        if st.button("Add location", key=f"{prefix}_add_location"):
            if not new_name.strip():
                st.error("Location name is required")
            else:
                created: Dict[str, str] = {}

                def _create():
                    loc = loc_hooks.create_location(LocationInput(name=new_name), session.identity())
                    created["id"] = loc.id

                if session.submit(_create, doing="adding the location"):
                    st.session_state[select_key] = created["id"]

    try:
        active = loc_hooks.active_locations()
    except Exception as exc:
        log.error("Could not load locations", exc_info=True)
        st.error(error_message(exc, "Failed to load locations"))
        active = []

    names = {loc.id: loc.name for loc in active}
    # An edited report may point at a location that has since been deactivated
    if current and current.location_id and current.location_id not in names:
        names[current.location_id] = current.location_label
    if current and select_key not in st.session_state and current.location_id:
        st.session_state[select_key] = current.location_id

    return st.selectbox(
        "Location", list(names), index=None, format_func=names.get,
        placeholder="Select a location", key=select_key,
    )


def _report_form(prefix: str, current: Optional[AttendanceReport] = None) -> Dict[str, object]:
    values: Dict[str, object] = {}
    c1, c2 = st.columns(2)
    with c1:
        values["date"] = st.date_input("Date", value=current.date if current else today_local(), key=f"{prefix}_date")
    with c2:
        tier = current.tier.value if current else "gray"
        values["tier"] = st.selectbox(
            "Tier", TIERS, index=TIERS.index(tier), format_func=str.title, key=f"{prefix}_tier",
        )
    values["location_id"] = _location_picker(prefix, current)

    cols = st.columns(4)
    for i, field in enumerate(COUNTER_FIELDS):
        with cols[i % 4]:
            values[field] = int(st.number_input(
                CATEGORY_LABELS[field], min_value=0, step=1,
                value=getattr(current, field) if current else 0, key=f"{prefix}_{field}",
            ))
    # Live total; the stored total is computed by the database
    st.metric("Total", f"{sum(values[f] for f in COUNTER_FIELDS):,}")
    return values


FORM_FIELDS = ("date", "tier", "location", "new_location", *COUNTER_FIELDS)


def _clear_form_state(prefix: str):
    session.clear_form_state(st.session_state, prefix, FORM_FIELDS)


def save_report(hooks, values: Dict[str, object], report: Optional[AttendanceReport] = None) -> bool:
    """Create, or update when `report` is given. A report must name a location."""
    if not values.get("location_id"):
        st.error("Please select a location")
        return False
    if report is None:
        return session.submit(lambda: hooks.create_report(AttendanceReportInput(**values)), doing="creating the report")
    return session.submit(
        lambda: hooks.update_report(report.id, AttendanceReportUpdate(**values)),
        doing="updating the report",
    )


@st.dialog("Add attendance report", width="large")
def add_report_dialog():
    hooks = session.attendance_hooks()
    values = _report_form("add_report")
    if st.button("Create report", type="primary", key="add_report_submit"):
        if save_report(hooks, values):
            _clear_form_state("add_report")
            st.rerun()


@st.dialog("Edit attendance report", width="large")
def edit_report_dialog(report: AttendanceReport):
    hooks = session.attendance_hooks()
    prefix = f"edit_report_{report.id}"
    values = _report_form(prefix, report)
    if st.button("Save changes", type="primary", key=f"{prefix}_submit"):
        if save_report(hooks, values, report):
            _clear_form_state(prefix)
            st.rerun()


@st.dialog("Delete attendance report")
def delete_report_dialog(report: AttendanceReport):
    hooks = session.attendance_hooks()
    st.write(
        f"Delete the **{report.location_label}** report from **{report.date:%B} {report.date.day}, {report.date.year}**? "
        "This cannot be undone."
    )
    c1, c2 = st.columns(2)
    if c1.button("Delete", type="primary", key="delete_report_confirm"):
        if session.submit(lambda: hooks.delete_report(report.id), doing="deleting the report"):
            st.rerun()
    if c2.button("Cancel", key="delete_report_cancel"):
        st.rerun()


# ─────────────────────────────
# Table
# ─────────────────────────────
def _reports_table(reports: List[AttendanceReport]):
    if not reports:
        st.info(EMPTY_TEXT)
        return

    c1, c2 = st.columns([1, 4])
    with c1:
        page_size = st.selectbox(
            "Rows per page", PAGE_SIZES, key="dash_page_size", on_change=session.reset_page(PAGE_KEY),
        )
    page = paginate(reports, st.session_state.get(PAGE_KEY, 1), page_size)
    st.session_state[PAGE_KEY] = page.page

    event = st.dataframe(
        style_tiers(reports_frame(page.items)),
        width="stretch",
        hide_index=True,
        on_select="rerun",
        selection_mode="single-row",
        key=table_key(f"dash_table_{page_size}", page.items),
    )

    p1, p2, p3 = st.columns([1, 3, 1])
    with p1:
        if st.button("◀ Previous", disabled=page.page <= 1, key="dash_prev"):
            st.session_state[PAGE_KEY] = page.page - 1
            st.rerun()
    with p2:
        st.caption(f"{page.label} · page {page.page} of {page.total_pages}")
    with p3:
        if st.button("Next ▶", disabled=page.page >= page.total_pages, key="dash_next"):
            st.session_state[PAGE_KEY] = page.page + 1
            st.rerun()

    picked = selected_item(page.items, event.selection.rows if event else [])
    if picked is not None:
        a1, a2, _ = st.columns([1, 1, 4])
        if a1.button("✏️ Edit", key="dash_edit"):
            # Start from the stored values, not a draft left by a dismissed dialog
            _clear_form_state(f"edit_report_{picked.id}")
            edit_report_dialog(picked)
        if a2.button("🗑️ Delete", key="dash_delete"):
            delete_report_dialog(picked)


# ─────────────────────────────
# Page
# ─────────────────────────────
def dashboard_page():
    identity = session.identity()
    hooks = session.attendance_hooks()

    head, action = st.columns([4, 1])
    with head:
        st.title("📊 Dashboard")
        if identity:
            st.caption(f"Welcome back, {identity.display_name}!")
    with action:
        if st.button("➕ Add report", type="primary", key="dash_add"):
            add_report_dialog()

    filters = _filters_bar()
    try:
        metrics = hooks.metrics(filters)
        reports = hooks.all_reports(filters)
    except Exception as exc:
        log.error("Could not load attendance", exc_info=True)
        st.error(error_message(exc, "Failed to load attendance reports"))
        return

    metric_cards(metrics)
    category_chart(metrics)

    st.subheader("Attendance reports")
    _reports_table(reports)
