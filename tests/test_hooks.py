from datetime import date

import pytest
from postgrest.exceptions import APIError

from garage.models import (
    AttendanceReportInput,
    AttendanceReportUpdate,
    LocationFilters,
    LocationInput,
    LocationUpdate,
    ReportFilters,
)
from dashboard.hooks.attendance import ALL_REPORTS_TTL, METRICS_TTL
from dashboard.hooks.base import MutationError, error_message
from dashboard.hooks.locations import ACTIVE


# ── reads ──────────────────────────────────────────────────────────────────
def test_repeated_reads_within_window_hit_cache(sb, attendance_hooks, clock, make_report):
    make_report(sv1=1)
    attendance_hooks.all_reports(ReportFilters())
    attendance_hooks.all_reports(ReportFilters())
    assert sb.reads("attendance_reports") == 1

    clock.advance(ALL_REPORTS_TTL)
    attendance_hooks.all_reports(ReportFilters())
    assert sb.reads("attendance_reports") == 2


def test_metrics_key_ignores_tier_and_paging(sb, attendance_hooks, clock):
    attendance_hooks.metrics(ReportFilters(tier_filter="red"))
    attendance_hooks.metrics(ReportFilters(tier_filter="blue", page=2, page_size=5))
    assert sb.reads() == 1
    clock.advance(METRICS_TTL - 1)
    attendance_hooks.metrics(ReportFilters())
    assert sb.reads() == 1


def test_all_reports_are_ordered_by_total(attendance_hooks, make_report):
    make_report(day=date(2025, 8, 10), sv1=3)
    make_report(day=date(2025, 8, 3), sv1=30)
    assert [r.total_attendance for r in attendance_hooks.all_reports()] == [30, 3]


def test_short_search_skips_the_store(sb, location_hooks, make_location):
    make_location("Hall A")
    assert location_hooks.search("h") == []
    assert location_hooks.search(" ") == []
    assert sb.reads() == 0
    assert [l.name for l in location_hooks.search("ha")] == ["Hall A"]


def test_usage_without_id_skips_the_store(sb, location_hooks):
    assert location_hooks.usage_stats(None) is None
    assert location_hooks.usage_stats("") is None
    assert sb.reads() == 0


# ── attendance writes ──────────────────────────────────────────────────────
def test_create_report_patches_lists_and_invalidates(cache, attendance_hooks, location_hooks, notifier, make_report, make_location):
    loc = make_location("Hall A")
    make_report(sv1=50)
    make_report(sv1=2)
    location_hooks.active_locations()
    before = attendance_hooks.all_reports()
    attendance_hooks.metrics()

    created = attendance_hooks.create_report(AttendanceReportInput(date=date(2025, 8, 17), location_id=loc.id, sv1=10))

    cached = cache.peek(("attendance", "all-reports", ReportFilters()))
    assert [r.total_attendance for r in cached] == [50, 10, 2]
    assert len(before) == 2
    assert cache.is_stale(("attendance", "metrics", ReportFilters()))
    assert created.location.name == "Hall A"
    assert notifier.messages == [("success", "Attendance report for Hall A on Aug 17, 2025 created successfully!")]


def test_update_report_resorts_cached_list(cache, attendance_hooks, make_report):
    low = make_report(sv1=1)
    make_report(sv1=20)
    attendance_hooks.all_reports()
    attendance_hooks.update_report(low.id, AttendanceReportUpdate(sv1=99))
    cached = cache.peek(("attendance", "all-reports", ReportFilters()))
    assert [(r.id, r.total_attendance) for r in cached][0] == (low.id, 99)


def test_delete_report_removes_from_cache(cache, attendance_hooks, notifier, make_report, make_location):
    loc = make_location("Hall A")
    report = make_report(day=date(2025, 8, 10), location_id=loc.id, sv1=1)
    attendance_hooks.all_reports()
    attendance_hooks.delete_report(report.id)
    assert cache.peek(("attendance", "all-reports", ReportFilters())) == []
    assert notifier.messages[-1] == ("success", "Attendance report for Hall A on Aug 10, 2025 deleted successfully!")


def test_failed_write_notifies_raises_and_leaves_cache(sb, cache, attendance_hooks, notifier, make_report):
    make_report(sv1=5)
    attendance_hooks.all_reports()
    sb.fail_next(APIError({"message": "new row violates check constraint", "code": "23514"}))

    with pytest.raises(MutationError) as exc_info:
        attendance_hooks.create_report(AttendanceReportInput(date=date(2025, 8, 17), sv1=1))

    assert isinstance(exc_info.value.__cause__, APIError)
    assert notifier.messages == [("error", "new row violates check constraint")]
    assert not cache.is_stale(("attendance", "all-reports", ReportFilters()))
    assert len(cache.peek(("attendance", "all-reports", ReportFilters()))) == 1


def test_error_message_falls_back_when_store_gives_none():
    assert error_message(RuntimeError(), "Failed to create attendance report") == "Failed to create attendance report"
    assert error_message(RuntimeError("boom"), "fallback") == "boom"


# ── location writes ────────────────────────────────────────────────────────
def test_create_location_inserts_into_active_by_name(cache, location_hooks, notifier, make_location):
    make_location("Annex")
    make_location("Chapel")
    location_hooks.active_locations()
    location_hooks.create_location(LocationInput(name="Barn"))
    assert [l.name for l in cache.peek(ACTIVE)] == ["Annex", "Barn", "Chapel"]
    assert cache.is_stale(ACTIVE)
    assert notifier.messages == [("success", 'Location "Barn" created successfully!')]


def test_deactivating_drops_from_active_and_keeps_usage(cache, location_hooks, make_location, make_report):
    loc = make_location("Annex")
    make_report(location_id=loc.id)
    location_hooks.active_locations()
    location_hooks.locations()

    location_hooks.update_location(loc.id, LocationUpdate(is_active=False))

    assert cache.peek(ACTIVE) == []
    listed = cache.peek(("locations", "list", LocationFilters()))
    assert (listed[0].is_active, listed[0].usage_count) == (False, 1)


def test_deleting_location_invalidates_attendance(cache, attendance_hooks, location_hooks, notifier, make_location, make_report):
    loc = make_location("Hall A")
    make_report(location_id=loc.id, sv1=10, sv2=5, kids=3, local=2)
    assert attendance_hooks.all_reports()[0].location_label == "Hall A"
    location_hooks.locations()

    location_hooks.delete_location(loc.id)

    assert cache.is_stale(("attendance", "all-reports", ReportFilters()))
    assert cache.peek(("locations", "list", LocationFilters())) == []
    assert notifier.messages[-1] == ("success", 'Location "Hall A" deleted successfully!')
    report = attendance_hooks.all_reports()[0]
    assert report.location is None
    assert report.location_label == "Unknown Location"
    assert report.total_attendance == 20
