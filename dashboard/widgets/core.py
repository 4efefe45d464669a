# dashboard/widgets/core.py
from __future__ import annotations
import hashlib
from typing import Optional, Sequence, TypeVar

import altair as alt
import pandas as pd
import streamlit as st

from garage.models import COUNTER_FIELDS, AttendanceReport, DashboardMetrics, LocationWithUsage

T = TypeVar("T")

# Column headers for the counted categories
CATEGORY_LABELS = {
    "sv1": "SV1",
    "sv2": "SV2",
    "yxp": "YXP",
    "kids": "Kids",
    "local": "Local",
    "hc1": "HC1",
    "hc2": "HC2",
}

TIER_COLORS = {
    "purple": "#8b5cf6",
    "green": "#22c55e",
    "yellow": "#eab308",
    "orange": "#f97316",
    "red": "#ef4444",
    "blue": "#3b82f6",
    "gray": "#9ca3af",
}


def format_date_series(s: pd.Series) -> pd.Series:
    """
    Convert anything parseable to 'Month D, YYYY' strings.
    Avoids platform issues with %-d by composing the day manually.
    """
    s = pd.to_datetime(s, errors="coerce", utc=False)
    return (s.dt.strftime("%B ")
            + s.dt.day.astype("Int64").astype("string")
            + s.dt.strftime(", %Y")).astype("string")


def reports_frame(reports: Sequence[AttendanceReport]) -> pd.DataFrame:
    """Display table for attendance reports; reports without a location read 'Unknown Location'."""
    columns = ["Date", "Location", "Tier", *CATEGORY_LABELS.values(), "Total"]
    if not reports:
        return pd.DataFrame(columns=columns)
    df = pd.DataFrame([
        {
            "Date": r.date,
            "Location": r.location_label,
            "Tier": r.tier.value.title(),
            **{CATEGORY_LABELS[f]: getattr(r, f) for f in COUNTER_FIELDS},
            "Total": r.total_attendance,
        }
        for r in reports
    ], columns=columns)
    df["Date"] = format_date_series(df["Date"])
    return df


def locations_frame(locations: Sequence[LocationWithUsage]) -> pd.DataFrame:
    columns = ["Name", "Address", "Capacity", "Reports", "Status"]
    return pd.DataFrame([
        {
            "Name": loc.name,
            "Address": loc.address or "",
            "Capacity": loc.capacity,
            "Reports": loc.usage_count,
            "Status": "Active" if loc.is_active else "Inactive",
        }
        for loc in locations
    ], columns=columns)


def kpi_card(label: str, value, delta=None):
    """
    Displays a single KPI metric. Optionally show delta.
    """
    if delta is not None:
        st.metric(label, f"{value:,}", delta)
    else:
        st.metric(label, f"{value:,}")


def metric_cards(metrics: DashboardMetrics):
    """Eight cards: the overall total, then one per category."""
    cards = [("Total Attendance", metrics.overall)] + [
        (CATEGORY_LABELS[f], getattr(metrics, f)) for f in COUNTER_FIELDS
    ]
    for row in (cards[:4], cards[4:]):
        for col, (label, value) in zip(st.columns(4), row):
            with col:
                kpi_card(label, value)


def category_frame(metrics: DashboardMetrics) -> pd.DataFrame:
    return pd.DataFrame(
        [{"category": CATEGORY_LABELS[f], "value": getattr(metrics, f)} for f in COUNTER_FIELDS]
    )


def category_chart(metrics: DashboardMetrics, title: str = "Attendance by category"):
    if metrics.overall == 0:
        st.info("No attendance in this period.")
        return
    chart = (
        alt.Chart(category_frame(metrics))
        .mark_bar()
        .encode(
            x=alt.X("category:N", sort=list(CATEGORY_LABELS.values()), title=None),
            y=alt.Y("value:Q", title=None),
            tooltip=["category:N", "value:Q"],
        )
        .properties(height=300, title=title)
    )
    st.altair_chart(chart, width="stretch")


def style_tiers(df: pd.DataFrame):
    """Colour the Tier column by tier."""
    if "Tier" not in df.columns:
        return df
    return df.style.map(lambda v: f"color: {TIER_COLORS.get(str(v).lower(), 'inherit')}", subset=["Tier"])


def table_key(prefix: str, items: Sequence) -> str:
    """
    Widget key for a selectable table, derived from the ids on show.
    Any change to which rows are displayed yields a new key, so a row
    selection made against older contents is discarded instead of reused.
    """
    digest = hashlib.sha1("|".join(str(i.id) for i in items).encode()).hexdigest()
    return f"{prefix}_{digest[:10]}"


def selected_item(items: Sequence[T], rows: Sequence[int]) -> Optional[T]:
    """The item at the first selected row, or None when nothing valid is selected."""
    if not rows:
        return None
    index = rows[0]
    if not 0 <= index < len(items):
        return None
    return items[index]
