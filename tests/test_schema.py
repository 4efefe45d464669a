import uuid
from datetime import date

import pytest
from sqlalchemy import create_engine, event, select
from sqlalchemy.exc import IntegrityError

from garage.schema import RLS_STATEMENTS, attendance_reports, locations
from scripts.init_schema import init_schema


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(f"sqlite:///{tmp_path / 'garage.db'}", future=True)

    @event.listens_for(eng, "connect")
    def _foreign_keys(dbapi_conn, _):
        dbapi_conn.execute("PRAGMA foreign_keys=ON")

    init_schema(eng)
    return eng


def _add_location(conn, name="Hall A"):
    loc_id = uuid.uuid4()
    conn.execute(locations.insert().values(id=loc_id, name=name))
    return loc_id


def test_total_is_generated_from_counters(engine):
    with engine.begin() as conn:
        conn.execute(attendance_reports.insert().values(
            date=date(2025, 8, 10), sv1=10, sv2=5, yxp=0, kids=3, local=2, hc1=0, hc2=0,
        ))
        row = conn.execute(select(attendance_reports)).mappings().one()
    assert row["total_attendance"] == 20
    assert row["tier"] == "gray"


def test_counters_default_to_zero(engine):
    with engine.begin() as conn:
        conn.execute(attendance_reports.insert().values(date=date(2025, 8, 10), kids=4))
        row = conn.execute(select(attendance_reports)).mappings().one()
    assert (row["sv1"], row["hc2"], row["total_attendance"]) == (0, 0, 4)


def test_deleting_location_nulls_report_reference(engine):
    with engine.begin() as conn:
        loc_id = _add_location(conn)
        conn.execute(attendance_reports.insert().values(date=date(2025, 8, 10), location_id=loc_id, sv1=7))
    with engine.begin() as conn:
        conn.execute(locations.delete().where(locations.c.id == loc_id))
    with engine.connect() as conn:
        row = conn.execute(select(attendance_reports)).mappings().one()
    assert row["location_id"] is None
    assert row["total_attendance"] == 7


@pytest.mark.parametrize("values", [
    {"sv1": -1},
    {"tier": "magenta"},
])
def test_constraints_reject_bad_reports(engine, values):
    with pytest.raises(IntegrityError):
        with engine.begin() as conn:
            conn.execute(attendance_reports.insert().values(date=date(2025, 8, 10), **values))


def test_capacity_must_be_positive(engine):
    with pytest.raises(IntegrityError):
        with engine.begin() as conn:
            conn.execute(locations.insert().values(id=uuid.uuid4(), name="Tiny", capacity=0))


def test_rls_statements_cover_both_tables():
    joined = "\n".join(RLS_STATEMENTS)
    for table in ("locations", "attendance_reports"):
        assert f"ALTER TABLE public.{table} ENABLE ROW LEVEL SECURITY" in joined
        assert f"ON public.{table} FOR ALL TO authenticated" in joined
