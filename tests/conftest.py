# tests/conftest.py
import os
from datetime import date

import pytest

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")

from garage.models import AttendanceReportInput, LocationInput
from garage.services.attendance import AttendanceService
from garage.services.locations import LocationService
from dashboard.hooks.attendance import AttendanceHooks
from dashboard.hooks.base import RecordingNotifier
from dashboard.hooks.locations import LocationHooks
from dashboard.lib.cache import QueryCache

from fakes import FakeSupabase


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def sb():
    return FakeSupabase()


@pytest.fixture
def attendance(sb):
    return AttendanceService(sb)


@pytest.fixture
def locations(sb):
    return LocationService(sb)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return QueryCache(clock=clock)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def attendance_hooks(attendance, cache, notifier):
    return AttendanceHooks(attendance, cache, notifier)


@pytest.fixture
def location_hooks(locations, cache, notifier):
    return LocationHooks(locations, cache, notifier)


@pytest.fixture
def make_location(locations):
    def _make(name="Hall A", **kw):
        return locations.create_location(LocationInput(name=name, **kw))
    return _make


@pytest.fixture
def make_report(attendance):
    def _make(day=date(2025, 8, 10), location_id=None, **counts):
        return attendance.create_report(AttendanceReportInput(date=day, location_id=location_id, **counts))
    return _make
