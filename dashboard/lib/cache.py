# dashboard/lib/cache.py
"""
Per-session query cache behind the data hooks.

Keys are tuples such as ("attendance", "metrics", ReportFilters(...)); filter
values are frozen dataclasses, so equal filters hit the same entry. Reads are
served from cache while fresh and not invalidated; at most one load per key
runs at a time. Writes patch cached lists through the reducers below and then
invalidate their whole domain prefix.
"""
from __future__ import annotations
import threading
import time
from dataclasses import dataclass
from operator import attrgetter
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence, Tuple, TypeVar

QueryKey = Tuple[Hashable, ...]
T = TypeVar("T")


@dataclass
class _Entry:
    value: Any
    fetched_at: float
    stale: bool = False


def key_matches(key: QueryKey, prefix: QueryKey) -> bool:
    return key[: len(prefix)] == prefix


class QueryCache:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[QueryKey, _Entry] = {}
        self._locks: Dict[QueryKey, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, key: QueryKey) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(key, threading.Lock())

    def _fresh(self, key: QueryKey, stale_after: float) -> Optional[_Entry]:
        with self._guard:
            entry = self._entries.get(key)
        if entry is None or entry.stale:
            return None
        if self._clock() - entry.fetched_at >= stale_after:
            return None
        return entry

    def fetch(self, key: QueryKey, loader: Callable[[], T], *, stale_after: float) -> T:
        entry = self._fresh(key, stale_after)
        if entry is not None:
            return entry.value
        with self._lock_for(key):
            # Another caller may have loaded it while we waited on the lock
            entry = self._fresh(key, stale_after)
            if entry is not None:
                return entry.value
            value = loader()
            with self._guard:
                self._entries[key] = _Entry(value, self._clock())
            return value

    def peek(self, key: QueryKey) -> Any:
        """Cached value regardless of freshness, or None."""
        with self._guard:
            entry = self._entries.get(key)
        return entry.value if entry else None

    def matching(self, prefix: QueryKey) -> List[Any]:
        with self._guard:
            return [e.value for k, e in self._entries.items() if key_matches(k, prefix)]

    def set(self, key: QueryKey, value: Any) -> None:
        with self._guard:
            self._entries[key] = _Entry(value, self._clock())

    def update_matching(self, prefix: QueryKey, updater: Callable[[Any], Any]) -> int:
        """Apply updater to every cached value under prefix; returns how many changed."""
        with self._guard:
            hits = [e for k, e in self._entries.items() if key_matches(k, prefix)]
            for entry in hits:
                entry.value = updater(entry.value)
        return len(hits)

    def invalidate(self, prefix: QueryKey = ()) -> int:
        """Mark entries stale so the next read refetches; the values stay peekable."""
        with self._guard:
            hits = [e for k, e in self._entries.items() if key_matches(k, prefix)]
            for entry in hits:
                entry.stale = True
        return len(hits)

    def is_stale(self, key: QueryKey) -> bool:
        with self._guard:
            entry = self._entries.get(key)
        return entry is None or entry.stale

    def prune(self, max_age: float) -> int:
        """
        Drop entries fetched more than max_age seconds ago, along with lock
        slots no longer backing an entry. Returns how many entries went.
        """
        cutoff = self._clock() - max_age
        with self._guard:
            doomed = [k for k, e in self._entries.items() if e.fetched_at < cutoff]
            for key in doomed:
                del self._entries[key]
            for key in [k for k, lock in self._locks.items() if k not in self._entries and not lock.locked()]:
                del self._locks[key]
        return len(doomed)

    def clear(self) -> None:
        with self._guard:
            self._entries.clear()
            self._locks = {k: lock for k, lock in self._locks.items() if lock.locked()}


# ─────────────────────────────
# Reducers for optimistic list updates
# ─────────────────────────────
_id = attrgetter("id")


def insert_sorted(rows: Sequence[T], item: T, *, sort_key: Callable[[T], Any], reverse: bool = False) -> List[T]:
    # New item first, so on ties it lands ahead of older rows (sort is stable)
    return sorted([item, *rows], key=sort_key, reverse=reverse)


def replace_sorted(rows: Sequence[T], item: T, *, sort_key: Callable[[T], Any], reverse: bool = False) -> List[T]:
    target = _id(item)
    return sorted([item if _id(r) == target else r for r in rows], key=sort_key, reverse=reverse)


def remove_by_id(rows: Sequence[T], item_id: str) -> List[T]:
    return [r for r in rows if _id(r) != item_id]


def on_lists(reducer: Callable[[list], list]) -> Callable[[Any], Any]:
    """Wrap a reducer so non-list cache values (pages, stats) pass through untouched."""
    def apply(value):
        return reducer(value) if isinstance(value, list) else value
    return apply
