# garage/schema.py
"""
Table definitions for the two store tables.

The store owns two invariants the app relies on: `total_attendance` is a
generated column, and deleting a location nulls `location_id` on its reports.
"""
import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Computed,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    Uuid,
    func,
    true,
)

from .models import COUNTER_FIELDS, TIERS

metadata = MetaData()

locations = Table(
    "locations",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("name", String(200), nullable=False, index=True),
    Column("address", Text),
    Column("capacity", Integer, CheckConstraint("capacity > 0", name="locations_capacity_positive")),
    Column("description", Text),
    Column("is_active", Boolean, nullable=False, server_default=true()),
    # auth.users(id) on Supabase; kept as a plain column so the table is portable
    Column("created_by", Uuid),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)


def _counter(name: str) -> Column:
    return Column(
        name,
        Integer,
        CheckConstraint(f"{name} >= 0", name=f"attendance_reports_{name}_non_negative"),
        nullable=False,
        server_default="0",
    )


TOTAL_EXPR = " + ".join(COUNTER_FIELDS)
TIER_CHECK = "tier IN (" + ", ".join(f"'{t}'" for t in TIERS) + ")"

attendance_reports = Table(
    "attendance_reports",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("date", Date, nullable=False, index=True),
    Column("location_id", Uuid, ForeignKey("locations.id", ondelete="SET NULL"), index=True),
    *[_counter(name) for name in COUNTER_FIELDS],
    Column("tier", String(16), CheckConstraint(TIER_CHECK, name="attendance_reports_tier_valid"),
           nullable=False, server_default="gray"),
    Column("total_attendance", Integer, Computed(TOTAL_EXPR, persisted=True)),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()),
)

# Row-level security for Supabase: any signed-in user may read and write.
RLS_STATEMENTS = [
    stmt
    for table in ("locations", "attendance_reports")
    for stmt in (
        f"ALTER TABLE public.{table} ENABLE ROW LEVEL SECURITY",
        f'DROP POLICY IF EXISTS "authenticated full access" ON public.{table}',
        f'CREATE POLICY "authenticated full access" ON public.{table} '
        f"FOR ALL TO authenticated USING (true) WITH CHECK (true)",
    )
]
