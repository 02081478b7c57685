"""
Places Router - Nearby safe-place search proxy
"""
import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from disaster_alert.dependencies import get_places_service
from disaster_alert.services.places_service import PlacesService, PlacesUpstreamError

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_float(name: str, value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        number = math.nan
    if not math.isfinite(number):
        raise HTTPException(status_code=400, detail=f"Parameter '{name}' must be a number")
    return number


@router.get("/nearby")
async def search_nearby_places(
    lat: Optional[str] = Query(None, description="Latitude of the search center"),
    lng: Optional[str] = Query(None, description="Longitude of the search center"),
    type: Optional[str] = Query(None, description="Place type, e.g. hospital or police"),
    radius: Optional[str] = Query(None, description="Search radius in meters (default 5000)"),
    service: PlacesService = Depends(get_places_service)
):
    """
    Search the places provider around a point.

    Returns the legacy nearby-search shape `{results, status}`. There is no
    fallback here: provider failures are reported as 500 and the client decides
    what to show.
    """
    if not lat or not lng or not type:
        raise HTTPException(
            status_code=400,
            detail="Missing required parameters: lat, lng, and type are required"
        )

    lat_value = _parse_float("lat", lat)
    lng_value = _parse_float("lng", lng)
    radius_value = _parse_float("radius", radius) if radius else None

    try:
        return await service.search_nearby(lat_value, lng_value, type, radius_value)
    except PlacesUpstreamError as e:
        logger.error(f"Error fetching places: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch places")
