# dashboard/hooks/locations.py
from __future__ import annotations
from typing import List, Optional

from garage.auth import Identity
from garage.models import (
    Location,
    LocationFilters,
    LocationInput,
    LocationUpdate,
    LocationUsageStats,
    LocationWithUsage,
)
from garage.services.locations import LocationService

from dashboard.lib.cache import QueryCache, insert_sorted, on_lists, remove_by_id, replace_sorted
from .attendance import DOMAIN as ATTENDANCE
from .base import MINUTE, Notifier, run_mutation

DOMAIN = ("locations",)
ACTIVE = DOMAIN + ("active",)
LISTS = DOMAIN + ("list",)

LIST_TTL = 5 * MINUTE
SEARCH_TTL = 5 * MINUTE
ACTIVE_TTL = 15 * MINUTE
USAGE_TTL = 2 * MINUTE

MIN_SEARCH_CHARS = 2


def _by_name(loc: Location) -> str:
    return loc.name.casefold()


class LocationHooks:
    def __init__(self, service: LocationService, cache: QueryCache, notify: Notifier):
        self.service = service
        self.cache = cache
        self.notify = notify

    # ── Reads ───────────────────────────────────────────────────────────────
    def locations(self, filters: LocationFilters = LocationFilters()) -> List[LocationWithUsage]:
        return self.cache.fetch(
            LISTS + (filters,),
            lambda: self.service.list_locations(filters),
            stale_after=LIST_TTL,
        )

    def active_locations(self) -> List[Location]:
        return self.cache.fetch(ACTIVE, self.service.list_active_locations, stale_after=ACTIVE_TTL)

    def search(self, query: Optional[str]) -> List[Location]:
        query = (query or "").strip()
        if len(query) < MIN_SEARCH_CHARS:
            return []
        return self.cache.fetch(
            DOMAIN + ("search", query),
            lambda: self.service.search_locations(query),
            stale_after=SEARCH_TTL,
        )

    def usage_stats(self, location_id: Optional[str]) -> Optional[LocationUsageStats]:
        if not location_id:
            return None
        return self.cache.fetch(
            DOMAIN + ("usage", location_id),
            lambda: self.service.get_usage_stats(location_id),
            stale_after=USAGE_TTL,
        )

    # ── Writes ──────────────────────────────────────────────────────────────
    def create_location(self, location: LocationInput, identity: Optional[Identity] = None) -> Location:
        def patched(created: Location) -> str:
            if created.is_active:
                self.cache.update_matching(ACTIVE, on_lists(lambda rows: insert_sorted(rows, created, sort_key=_by_name)))
            self.cache.invalidate(DOMAIN)
            return f'Location "{created.name}" created successfully!'

        return run_mutation(
            self.notify,
            lambda: self.service.create_location(location, identity),
            fallback="Failed to create location",
            on_success=patched,
        )

    def update_location(self, location_id: str, updates: LocationUpdate) -> Location:
        def in_list(rows: list, updated: Location) -> list:
            old = next((r for r in rows if r.id == updated.id), None)
            if old is None:
                return rows
            item = LocationWithUsage(**updated.model_dump(), usage_count=old.usage_count)
            return replace_sorted(rows, item, sort_key=_by_name)

        def in_active(rows: list, updated: Location) -> list:
            rows = remove_by_id(rows, updated.id)
            return insert_sorted(rows, updated, sort_key=_by_name) if updated.is_active else rows

        def patched(updated: Location) -> str:
            self.cache.update_matching(LISTS, on_lists(lambda rows: in_list(rows, updated)))
            self.cache.update_matching(ACTIVE, on_lists(lambda rows: in_active(rows, updated)))
            self.cache.invalidate(DOMAIN)
            return f'Location "{updated.name}" updated successfully!'

        return run_mutation(
            self.notify,
            lambda: self.service.update_location(location_id, updates),
            fallback="Failed to update location",
            on_success=patched,
        )

    def delete_location(self, location_id: str) -> None:
        name = self._cached_name(location_id)

        def patched(_) -> str:
            drop = on_lists(lambda rows: remove_by_id(rows, location_id))
            self.cache.update_matching(LISTS, drop)
            self.cache.update_matching(ACTIVE, drop)
            self.cache.invalidate(DOMAIN)
            # Its reports now show "Unknown Location"
            self.cache.invalidate(ATTENDANCE)
            return f'Location "{name}" deleted successfully!' if name else "Location deleted successfully!"

        run_mutation(
            self.notify,
            lambda: self.service.delete_location(location_id),
            fallback="Failed to delete location",
            on_success=patched,
        )

    def _cached_name(self, location_id: str) -> Optional[str]:
        for rows in self.cache.matching(LISTS) + self.cache.matching(ACTIVE):
            for loc in rows:
                if loc.id == location_id:
                    return loc.name
        return None
