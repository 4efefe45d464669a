# dashboard/views/placeholders.py
import streamlit as st


def coming_soon(title: str, blurb: str = ""):
    st.title(title)
    st.info("🚧 Coming Soon")
    if blurb:
        st.caption(blurb)


def attendance_page():
    coming_soon("Attendance", "Per-service attendance entry and history.")


def analytics_page():
    coming_soon("Analytics", "Trends and comparisons across locations and tiers.")


def reports_page():
    coming_soon("Reports", "Exportable summaries.")
