# garage/db.py

from typing import Optional

from sqlalchemy import create_engine
from supabase import Client, create_client

from .config import get_settings


def get_client(access_token: Optional[str] = None) -> Client:
    """
    Supabase client for the configured project.
    With an access token, PostgREST calls run as that user so row-level security applies.
    """
    settings = get_settings()
    client = create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
    if access_token:
        client.postgrest.auth(access_token)
    return client

# ──────────────────────────────────────────────────────────────────────────────────────────
#                  SQLAlchemy engine (schema provisioning against the project's Postgres)
# ──────────────────────────────────────────────────────────────────────────────────────────

def get_engine(url: Optional[str] = None):
    url = url or get_settings().DATABASE_URL
    if not url:
        raise RuntimeError("DATABASE_URL is not set (required for schema provisioning)")
    return create_engine(url, pool_pre_ping=True, future=True)
