# garage/services/locations.py
from __future__ import annotations
import logging
from typing import List, Optional

from garage.auth import Identity
from garage.models import (
    Location,
    LocationFilters,
    LocationInput,
    LocationUpdate,
    LocationUsageStats,
    LocationWithUsage,
    UsageReport,
)
from garage.services.attendance import TABLE as REPORTS_TABLE, fetch_all, first_row
from garage.utils.common import round_half_up

log = logging.getLogger(__name__)

TABLE = "locations"
SEARCH_LIMIT = 10
RECENT_REPORTS = 5

# One round trip: PostgREST embeds a grouped count of the referencing reports.
LIST_SELECT = f"*, usage:{REPORTS_TABLE}(count)"


def _usage_count(row: dict) -> int:
    usage = row.get("usage") or []
    return int(usage[0].get("count") or 0) if usage else 0


class LocationService:
    def __init__(self, client):
        self._client = client

    # ── Reads ───────────────────────────────────────────────────────────────
    def list_locations(self, filters: LocationFilters = LocationFilters()) -> List[LocationWithUsage]:
        def query():
            q = self._client.table(TABLE).select(LIST_SELECT).order("name").order("id")
            if filters.is_active is not None:
                q = q.eq("is_active", filters.is_active)
            if filters.search:
                q = q.ilike("name", f"%{filters.search}%")
            return q

        rows = fetch_all(query)
        return [
            LocationWithUsage.model_validate({**row, "usage_count": _usage_count(row)})
            for row in rows
        ]

    def list_active_locations(self) -> List[Location]:
        res = (
            self._client.table(TABLE)
            .select("*")
            .eq("is_active", True)
            .order("name")
            .execute()
        )
        return [Location.model_validate(r) for r in res.data or []]

    def search_locations(self, query: str) -> List[Location]:
        # Callers only search once the query has 2+ characters.
        res = (
            self._client.table(TABLE)
            .select("*")
            .eq("is_active", True)
            .ilike("name", f"%{query}%")
            .order("name")
            .limit(SEARCH_LIMIT)
            .execute()
        )
        return [Location.model_validate(r) for r in res.data or []]

    def get_usage_stats(self, location_id: str) -> LocationUsageStats:
        rows = fetch_all(
            lambda: self._client.table(REPORTS_TABLE)
            .select("date, total_attendance")
            .eq("location_id", location_id)
            .order("date", desc=True)
            .order("id")
        )
        reports = [UsageReport.model_validate(r) for r in rows]
        total = sum(r.total_attendance for r in reports)
        return LocationUsageStats(
            total_reports=len(reports),
            total_attendance=total,
            average_attendance=round_half_up(total / len(reports)) if reports else 0,
            last_used=reports[0].date if reports else None,
            reports=reports[:RECENT_REPORTS],
        )

    # ── Writes ──────────────────────────────────────────────────────────────
    def create_location(self, location: LocationInput, identity: Optional[Identity] = None) -> Location:
        row = {**location.to_row(), "created_by": identity.user_id if identity else None}
        res = self._client.table(TABLE).insert(row).execute()
        return Location.model_validate(first_row(res.data, "Location"))

    def update_location(self, location_id: str, updates: LocationUpdate) -> Location:
        res = self._client.table(TABLE).update(updates.to_row()).eq("id", location_id).execute()
        return Location.model_validate(first_row(res.data, f"Location {location_id}"))

    def delete_location(self, location_id: str) -> None:
        # Hard delete; the FK's ON DELETE SET NULL detaches the location's reports.
        log.info("Deleting location %s", location_id)
        try:
            self._client.table(TABLE).delete().eq("id", location_id).execute()
        except Exception:
            log.error("Error deleting location %s", location_id, exc_info=True)
            raise
        log.info("Deleted location %s", location_id)
