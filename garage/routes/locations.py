# garage/routes/locations.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

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
from .deps import get_identity, location_service

router = APIRouter(prefix="/locations", tags=["Locations"])


@router.get("/", response_model=List[LocationWithUsage])
def list_locations(
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    svc: LocationService = Depends(location_service),
):
    return svc.list_locations(LocationFilters(search=search or None, is_active=is_active))


@router.get("/active", response_model=List[Location])
def list_active_locations(svc: LocationService = Depends(location_service)):
    return svc.list_active_locations()


@router.get("/search", response_model=List[Location])
def search_locations(
    q: str = Query(..., min_length=2, description="Part of the location name"),
    svc: LocationService = Depends(location_service),
):
    return svc.search_locations(q)


@router.get("/{location_id}/usage", response_model=LocationUsageStats)
def get_usage_stats(location_id: str, svc: LocationService = Depends(location_service)):
    return svc.get_usage_stats(location_id)


@router.post("/", response_model=Location, status_code=status.HTTP_201_CREATED)
def create_location(
    data: LocationInput,
    identity: Identity = Depends(get_identity),
    svc: LocationService = Depends(location_service),
):
    return svc.create_location(data, identity)


@router.patch("/{location_id}", response_model=Location)
def update_location(location_id: str, data: LocationUpdate, svc: LocationService = Depends(location_service)):
    return svc.update_location(location_id, data)


@router.delete("/{location_id}")
def delete_location(location_id: str, svc: LocationService = Depends(location_service)):
    svc.delete_location(location_id)
    return {"status": "deleted", "id": location_id}
