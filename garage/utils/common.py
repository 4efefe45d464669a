from __future__ import annotations
import calendar
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Generic, Optional, Sequence, Tuple, TypeVar
from zoneinfo import ZoneInfo

from garage.config import get_settings

# ─────────────────────────────
# Time & Date helpers
# ─────────────────────────────
DATE_PRESETS = ("all", "this-week", "last-week", "this-month", "last-month", "custom-range")


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def as_iso(self) -> Tuple[str, str]:
        return self.start.isoformat(), self.end.isoformat()

    def __contains__(self, d: date) -> bool:
        return self.start <= d <= self.end


def app_tz() -> ZoneInfo:
    return ZoneInfo(get_settings().APP_TIMEZONE)


def today_local(tz: Optional[ZoneInfo] = None) -> date:
    return datetime.now(tz=tz or app_tz()).date()


def week_bounds_for(d: date) -> Tuple[date, date]:
    """Return Sunday..Saturday (inclusive) for the week containing d."""
    sunday = d - timedelta(days=(d.weekday() + 1) % 7)
    return sunday, sunday + timedelta(days=6)


def month_bounds_for(year: int, month: int) -> Tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def resolve_date_range(
    preset: Optional[str],
    custom_from: Optional[date] = None,
    custom_to: Optional[date] = None,
    *,
    today: Optional[date] = None,
) -> Optional[DateRange]:
    """
    Expand a named preset into an inclusive calendar-day range.
    Returns None when no date predicate should be applied ("all", unknown
    presets, or a custom range missing an endpoint).
    """
    today = today or today_local()

    if preset == "this-week":
        return DateRange(*week_bounds_for(today))

    if preset == "last-week":
        this_sunday, _ = week_bounds_for(today)
        end = this_sunday - timedelta(days=1)
        return DateRange(end - timedelta(days=6), end)

    if preset == "this-month":
        return DateRange(*month_bounds_for(today.year, today.month))

    if preset == "last-month":
        first_of_this = today.replace(day=1)
        prev = first_of_this - timedelta(days=1)
        return DateRange(*month_bounds_for(prev.year, prev.month))

    if preset == "custom-range":
        if custom_from is None or custom_to is None:
            return None
        start, end = sorted((custom_from, custom_to))
        return DateRange(start, end)

    return None


def describe_range(r: Optional[DateRange]) -> str:
    """'Aug 3 - Aug 9' style label for filter chips."""
    if r is None:
        return "All time"
    fmt = lambda d: f"{d.strftime('%b')} {d.day}"
    return f"{fmt(r.start)} - {fmt(r.end)}"

# ─────────────────────────────
# Math / display helpers
# ─────────────────────────────
def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


T = TypeVar("T")


@dataclass(frozen=True)
class PageSlice(Generic[T]):
    items: Sequence[T]
    total: int
    total_pages: int
    page: int
    start: int  # 0-based index of the first item on the page
    end: int    # exclusive

    @property
    def label(self) -> str:
        if not self.total:
            return "Showing 0 of 0 rows"
        return f"Showing {self.start + 1}-{self.end} of {self.total} rows"


def paginate(items: Sequence[T], page: int, page_size: int) -> PageSlice[T]:
    """Client-side slice; an out-of-range page is clamped to the last one."""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    total = len(items)
    total_pages = max(1, math.ceil(total / page_size))
    page = min(max(1, page), total_pages)
    start = (page - 1) * page_size
    end = min(start + page_size, total)
    return PageSlice(items[start:end], total, total_pages, page, start, end)


def page_to_range(page: int, page_size: int) -> Tuple[int, int]:
    """1-based page → inclusive (offset, last) row indexes for a range() query."""
    start = (page - 1) * page_size
    return start, start + page_size - 1
