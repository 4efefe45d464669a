# garage/routes/deps.py
import logging
from datetime import date
from typing import Optional

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from garage.auth import Identity, identity_for_token
from garage.db import get_client
from garage.models import TIERS, ReportFilters
from garage.services.attendance import AttendanceService
from garage.services.locations import LocationService
from garage.utils.common import DATE_PRESETS

log = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


def get_token(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> str:
    if creds is None or not creds.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return creds.credentials


def get_user_client(token: str = Depends(get_token)):
    """Supabase client acting as the caller, so row-level security applies."""
    return get_client(token)


def get_identity(token: str = Depends(get_token), client=Depends(get_user_client)) -> Identity:
    try:
        identity = identity_for_token(client, token)
    except Exception as exc:
        log.warning("Token rejected by auth server: %s", exc)
        raise HTTPException(status_code=401, detail="Invalid or expired token") from exc
    if identity is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return identity


def attendance_service(client=Depends(get_user_client)) -> AttendanceService:
    return AttendanceService(client)


def location_service(client=Depends(get_user_client)) -> LocationService:
    return LocationService(client)


def report_filters(
    date_filter: str = Query("all", description="all | this-week | last-week | this-month | last-month | custom-range"),
    custom_from: Optional[date] = Query(None),
    custom_to: Optional[date] = Query(None),
    tier_filter: str = Query("all"),
    page: Optional[int] = Query(None, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=500),
) -> ReportFilters:
    if date_filter not in DATE_PRESETS:
        raise HTTPException(status_code=422, detail=f"Unknown date_filter {date_filter!r}")
    if tier_filter != "all" and tier_filter not in TIERS:
        raise HTTPException(status_code=422, detail=f"Unknown tier {tier_filter!r}")
    return ReportFilters(date_filter, custom_from, custom_to, tier_filter, page, page_size)
