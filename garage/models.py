import datetime as dt
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNKNOWN_LOCATION = "Unknown Location"

# The seven counted categories, in display order.
COUNTER_FIELDS = ("sv1", "sv2", "yxp", "kids", "local", "hc1", "hc2")


class Tier(str, Enum):
    PURPLE = "purple"
    GREEN = "green"
    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"
    BLUE = "blue"
    GRAY = "gray"


TIERS = [t.value for t in Tier]


def _blank_to_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


# ─────────────────────────────
# Attendance reports
# ─────────────────────────────
class AttendanceCounts(BaseModel):
    sv1: int = Field(0, ge=0)
    sv2: int = Field(0, ge=0)
    yxp: int = Field(0, ge=0)
    kids: int = Field(0, ge=0)
    local: int = Field(0, ge=0)
    hc1: int = Field(0, ge=0)
    hc2: int = Field(0, ge=0)

    @field_validator(*COUNTER_FIELDS, mode="before")
    @classmethod
    def _null_counter_is_zero(cls, v):
        return 0 if v is None else v

    def counts_total(self) -> int:
        return sum(getattr(self, f) for f in COUNTER_FIELDS)


class AttendanceReportInput(AttendanceCounts):
    """Insert payload. total_attendance is generated by the store, so it is rejected here."""
    model_config = ConfigDict(extra="forbid")

    date: dt.date
    location_id: Optional[str] = None
    tier: Tier = Tier.GRAY

    def to_row(self) -> dict:
        return self.model_dump(mode="json")


class AttendanceReportUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    date: Optional[dt.date] = None
    location_id: Optional[str] = None
    tier: Optional[Tier] = None
    sv1: Optional[int] = Field(None, ge=0)
    sv2: Optional[int] = Field(None, ge=0)
    yxp: Optional[int] = Field(None, ge=0)
    kids: Optional[int] = Field(None, ge=0)
    local: Optional[int] = Field(None, ge=0)
    hc1: Optional[int] = Field(None, ge=0)
    hc2: Optional[int] = Field(None, ge=0)

    def to_row(self) -> dict:
        # Only what the caller actually set; an explicit location_id=None clears it.
        return self.model_dump(mode="json", exclude_unset=True)


class LocationRef(BaseModel):
    id: str
    name: str
    address: Optional[str] = None


class AttendanceReport(AttendanceCounts):
    model_config = ConfigDict(extra="ignore")

    id: str
    date: dt.date
    location_id: Optional[str] = None
    tier: Tier = Tier.GRAY
    total_attendance: int = 0
    location: Optional[LocationRef] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @field_validator("tier", mode="before")
    @classmethod
    def _default_tier(cls, v):
        return v or Tier.GRAY

    @field_validator("total_attendance", mode="before")
    @classmethod
    def _null_total_is_zero(cls, v):
        return 0 if v is None else v

    @property
    def location_label(self) -> str:
        return self.location.name if self.location else UNKNOWN_LOCATION


class ReportPage(BaseModel):
    reports: List[AttendanceReport]
    count: int


class DashboardMetrics(BaseModel):
    sv1: int = 0
    sv2: int = 0
    yxp: int = 0
    kids: int = 0
    local: int = 0
    hc1: int = 0
    hc2: int = 0
    overall: int = 0


# ─────────────────────────────
# Locations
# ─────────────────────────────
class LocationInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    address: Optional[str] = None
    capacity: Optional[int] = Field(None, gt=0)
    description: Optional[str] = None
    is_active: bool = True

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("address", "description", mode="before")
    @classmethod
    def _optional_text(cls, v):
        return _blank_to_none(v)

    @field_validator("capacity", mode="before")
    @classmethod
    def _optional_capacity(cls, v):
        # An empty or zero capacity means "not set"
        v = _blank_to_none(v)
        return None if v in (None, 0) else v

    def to_row(self) -> dict:
        return self.model_dump(mode="json")


class LocationUpdate(LocationInput):
    name: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None

    def to_row(self) -> dict:
        return self.model_dump(mode="json", exclude_unset=True)


class Location(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    address: Optional[str] = None
    capacity: Optional[int] = None
    description: Optional[str] = None
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: Optional[dt.datetime] = None


class LocationWithUsage(Location):
    usage_count: int = 0


class UsageReport(BaseModel):
    model_config = ConfigDict(extra="ignore")

    date: dt.date
    total_attendance: int = 0


class LocationUsageStats(BaseModel):
    total_reports: int = 0
    total_attendance: int = 0
    average_attendance: int = 0
    last_used: Optional[dt.date] = None
    reports: List[UsageReport] = Field(default_factory=list)


# ─────────────────────────────
# Filters (used verbatim in cache keys, so frozen + hashable)
# ─────────────────────────────
@dataclass(frozen=True)
class ReportFilters:
    date_filter: str = "all"
    custom_from: Optional[dt.date] = None
    custom_to: Optional[dt.date] = None
    tier_filter: str = "all"
    page: Optional[int] = None
    page_size: Optional[int] = None

    def without_paging(self) -> "ReportFilters":
        return replace(self, page=None, page_size=None)

    def for_metrics(self) -> "ReportFilters":
        # Metrics only honour the date window
        return replace(self, tier_filter="all", page=None, page_size=None)


@dataclass(frozen=True)
class LocationFilters:
    search: Optional[str] = None
    is_active: Optional[bool] = None
