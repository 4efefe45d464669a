# garage/services/attendance.py
from __future__ import annotations
import logging
from datetime import date
from typing import Any, Callable, List, Optional

from garage.models import (
    COUNTER_FIELDS,
    AttendanceReport,
    AttendanceReportInput,
    AttendanceReportUpdate,
    DashboardMetrics,
    ReportFilters,
    ReportPage,
)
from garage.utils.common import page_to_range, resolve_date_range

log = logging.getLogger(__name__)

TABLE = "attendance_reports"
REPORT_SELECT = "*, location:locations(id, name, address)"
METRICS_SELECT = ", ".join(COUNTER_FIELDS + ("total_attendance",))
# Rows per request when reading a whole listing; must not exceed the API max-rows (1000 on Supabase)
FETCH_CHUNK = 1000


class RecordNotFoundError(LookupError):
    """A write came back without a row (unknown id, or hidden by row-level security)."""


def first_row(data: Any, what: str) -> dict:
    if not data:
        raise RecordNotFoundError(f"{what} not found")
    return data[0]


def fetch_all(make_query: Callable[[], Any]) -> List[dict]:
    """
    Read every row of a query in FETCH_CHUNK slices. The query must have a
    total order so slices neither overlap nor skip rows.
    """
    rows: List[dict] = []
    start = 0
    while True:
        chunk = make_query().range(start, start + FETCH_CHUNK - 1).execute().data or []
        rows.extend(chunk)
        if len(chunk) < FETCH_CHUNK:
            return rows
        start += FETCH_CHUNK


class AttendanceService:
    def __init__(self, client):
        self._client = client

    def _apply_date_window(self, query, filters: ReportFilters, today: Optional[date]):
        if filters.date_filter and filters.date_filter != "all":
            window = resolve_date_range(filters.date_filter, filters.custom_from, filters.custom_to, today=today)
            if window:
                frm, to = window.as_iso()
                query = query.gte("date", frm).lte("date", to)
        return query

    def _report_query(self, filters: ReportFilters, today: Optional[date], *, count: Optional[str] = None):
        query = (
            self._client.table(TABLE)
            .select(REPORT_SELECT, count=count)
            .order("date", desc=True)
            .order("id")
        )
        query = self._apply_date_window(query, filters, today)
        if filters.tier_filter and filters.tier_filter != "all":
            query = query.eq("tier", filters.tier_filter)
        return query

    # ── Reads ───────────────────────────────────────────────────────────────
    def list_reports(self, filters: ReportFilters = ReportFilters(), *, today: Optional[date] = None) -> ReportPage:
        query = self._report_query(filters, today, count="exact")
        if filters.page and filters.page_size:
            query = query.range(*page_to_range(filters.page, filters.page_size))
        res = query.execute()
        rows = res.data or []
        return ReportPage(
            reports=[AttendanceReport.model_validate(r) for r in rows],
            count=res.count or 0,
        )

    def list_all_reports(self, filters: ReportFilters = ReportFilters(), *, today: Optional[date] = None) -> List[AttendanceReport]:
        """Every matching report, unpaged; the dashboard pages through these client-side."""
        filters = filters.without_paging()
        rows = fetch_all(lambda: self._report_query(filters, today))
        return [AttendanceReport.model_validate(r) for r in rows]

    def get_metrics(self, filters: ReportFilters = ReportFilters(), *, today: Optional[date] = None) -> DashboardMetrics:
        filters = filters.for_metrics()

        def query():
            q = self._client.table(TABLE).select(METRICS_SELECT).order("id")
            return self._apply_date_window(q, filters, today)

        rows = fetch_all(query)

        acc = dict.fromkeys(COUNTER_FIELDS + ("overall",), 0)
        for row in rows:
            for f in COUNTER_FIELDS:
                acc[f] += row.get(f) or 0
            acc["overall"] += row.get("total_attendance") or 0
        return DashboardMetrics(**acc)

    # ── Writes ──────────────────────────────────────────────────────────────
    def create_report(self, report: AttendanceReportInput) -> AttendanceReport:
        res = self._client.table(TABLE).insert(report.to_row()).execute()
        return AttendanceReport.model_validate(first_row(res.data, "Attendance report"))

    def update_report(self, report_id: str, updates: AttendanceReportUpdate) -> AttendanceReport:
        res = self._client.table(TABLE).update(updates.to_row()).eq("id", report_id).execute()
        return AttendanceReport.model_validate(first_row(res.data, f"Attendance report {report_id}"))

    def delete_report(self, report_id: str) -> None:
        self._client.table(TABLE).delete().eq("id", report_id).execute()
        log.info("Deleted attendance report %s", report_id)
