# dashboard/hooks/attendance.py
from __future__ import annotations
from typing import List, Optional

from garage.models import (
    AttendanceReport,
    AttendanceReportInput,
    AttendanceReportUpdate,
    DashboardMetrics,
    LocationRef,
    ReportFilters,
    ReportPage,
)
from garage.services.attendance import AttendanceService

from dashboard.lib.cache import QueryCache, insert_sorted, on_lists, remove_by_id, replace_sorted
from .base import MINUTE, Notifier, run_mutation

DOMAIN = ("attendance",)
ALL_REPORTS = DOMAIN + ("all-reports",)

REPORTS_TTL = 2 * MINUTE
ALL_REPORTS_TTL = 5 * MINUTE
METRICS_TTL = 10 * MINUTE


def _by_total(r: AttendanceReport) -> int:
    return r.total_attendance


def report_label(r: AttendanceReport) -> str:
    day = f"{r.date.strftime('%b')} {r.date.day}, {r.date.year}"
    return f"{r.location.name} on {day}" if r.location else day


class AttendanceHooks:
    def __init__(self, service: AttendanceService, cache: QueryCache, notify: Notifier):
        self.service = service
        self.cache = cache
        self.notify = notify

    # ── Reads ───────────────────────────────────────────────────────────────
    def reports(self, filters: ReportFilters) -> ReportPage:
        return self.cache.fetch(
            DOMAIN + ("reports", filters),
            lambda: self.service.list_reports(filters),
            stale_after=REPORTS_TTL,
        )

    def all_reports(self, filters: ReportFilters = ReportFilters()) -> List[AttendanceReport]:
        """Every matching report, highest total first (the order the table shows)."""
        filters = filters.without_paging()
        return self.cache.fetch(
            ALL_REPORTS + (filters,),
            lambda: sorted(self.service.list_all_reports(filters), key=_by_total, reverse=True),
            stale_after=ALL_REPORTS_TTL,
        )

    def metrics(self, filters: ReportFilters = ReportFilters()) -> DashboardMetrics:
        filters = filters.for_metrics()
        return self.cache.fetch(
            DOMAIN + ("metrics", filters),
            lambda: self.service.get_metrics(filters),
            stale_after=METRICS_TTL,
        )

    # ── Writes ──────────────────────────────────────────────────────────────
    def _with_location(self, report: AttendanceReport) -> AttendanceReport:
        # Inserts return the bare row; borrow the name from cached active locations.
        if report.location or not report.location_id:
            return report
        for loc in self.cache.peek(("locations", "active")) or []:
            if loc.id == report.location_id:
                ref = LocationRef(id=loc.id, name=loc.name, address=loc.address)
                return report.model_copy(update={"location": ref})
        return report

    def create_report(self, report: AttendanceReportInput) -> AttendanceReport:
        def patched(created: AttendanceReport) -> str:
            self.cache.update_matching(
                ALL_REPORTS, on_lists(lambda rows: insert_sorted(rows, created, sort_key=_by_total, reverse=True))
            )
            self.cache.invalidate(DOMAIN)
            return f"Attendance report for {report_label(created)} created successfully!"

        return run_mutation(
            self.notify,
            lambda: self._with_location(self.service.create_report(report)),
            fallback="Failed to create attendance report",
            on_success=patched,
        )

    def update_report(self, report_id: str, updates: AttendanceReportUpdate) -> AttendanceReport:
        def patched(updated: AttendanceReport) -> str:
            self.cache.update_matching(
                ALL_REPORTS, on_lists(lambda rows: replace_sorted(rows, updated, sort_key=_by_total, reverse=True))
            )
            self.cache.invalidate(DOMAIN)
            return f"Attendance report for {report_label(updated)} updated successfully!"

        return run_mutation(
            self.notify,
            lambda: self._with_location(self.service.update_report(report_id, updates)),
            fallback="Failed to update attendance report",
            on_success=patched,
        )

    def delete_report(self, report_id: str) -> None:
        known = self._cached_report(report_id)

        def patched(_) -> str:
            self.cache.update_matching(ALL_REPORTS, on_lists(lambda rows: remove_by_id(rows, report_id)))
            self.cache.invalidate(DOMAIN)
            if known:
                return f"Attendance report for {report_label(known)} deleted successfully!"
            return "Attendance report deleted successfully!"

        run_mutation(
            self.notify,
            lambda: self.service.delete_report(report_id),
            fallback="Failed to delete attendance report",
            on_success=patched,
        )

    def _cached_report(self, report_id: str) -> Optional[AttendanceReport]:
        for rows in self.cache.matching(ALL_REPORTS):
            for r in rows:
                if r.id == report_id:
                    return r
        return None
