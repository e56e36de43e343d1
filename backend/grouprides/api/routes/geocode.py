"""
Geocoding proxy routes.
"""
from fastapi import APIRouter
from typing import Optional
from grouprides.services import geocoding_service

router = APIRouter(prefix="/geocode", tags=["geocode"])


@router.get("")
def geocode(q: Optional[str] = None):
    """Search addresses; returns the geocoder's raw results."""
    return geocoding_service.search(q or "")


@router.get("/reverse")
def reverse_geocode(lat: float, lon: float):
    """Find the address for a coordinate pair."""
    return geocoding_service.reverse(lat, lon)
