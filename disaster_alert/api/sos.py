"""
SOS Router - Emergency coordinate reports
"""
import logging
import math
from typing import Any, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException

from disaster_alert.db import RecordStore, StoreError
from disaster_alert.dependencies import get_store
from disaster_alert.models import SOSEvent, SOSRequest, format_coordinate, utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter()


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def parse_coordinates(coordinates: Optional[list]) -> Optional[Tuple[float, float]]:
    """Return (lat, lng) for a 2-element numeric list, None for anything else"""
    if not isinstance(coordinates, list) or len(coordinates) != 2:
        return None
    lat, lng = coordinates
    if not (_is_number(lat) and _is_number(lng)):
        return None
    return lat, lng


@router.post("")
def create_sos_event(
    request: SOSRequest,
    store: RecordStore = Depends(get_store)
):
    """
    Record an SOS event with the caller's coordinates.

    Coordinates must be `[lat, lng]` numbers; strings are rejected, not coerced.
    Events are append-only and never deduplicated.
    """
    phone = (request.phone or "").strip()
    if not phone or request.coordinates is None:
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: phone and coordinates [lat, lng] are required"
        )

    coordinates = parse_coordinates(request.coordinates)
    if coordinates is None:
        raise HTTPException(
            status_code=400,
            detail="Coordinates must be valid numbers [latitude, longitude]"
        )

    event = SOSEvent(
        phone=phone,
        coordinates=coordinates,
        accuracy=format_coordinate(request.accuracy) if request.accuracy is not None else "Unknown",
        timestamp=request.timestamp or utc_now_iso()
    )

    try:
        store.add_sos_event(event)
    except StoreError as e:
        logger.error(f"Error saving SOS alert: {e}")
        raise HTTPException(status_code=500, detail="Failed to save SOS alert")

    logger.info(f"SOS Alert saved: Phone {phone}, Coordinates: {event.coordinates_string}")
    return {
        "message": "SOS Alert saved successfully",
        "phone": phone,
        "coordinates": event.coordinates_string,
        "timestamp": utc_now_iso()
    }
