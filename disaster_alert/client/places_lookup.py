"""
Places Lookup - concurrent safe-place search across a fixed set of categories

One search per category runs concurrently; a failing category never aborts the
others. Results are merged and deduplicated by provider id, first occurrence
in category order wins. When every category failed and nothing came back, a
small static list around the query point is returned instead, so the map never
goes blank because of a provider outage. A successful search with zero rows
returns an empty list.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional
from urllib.parse import urlencode

from pydantic import BaseModel

logger = logging.getLogger(__name__)

SAFE_TYPES = [
    "hospital",
    "police",
    "fire_station",
    "school",
    "university",
    "local_government_office",
    "city_hall",
    "library",
    "museum",
    "stadium",
    "lodging",
    "shopping_mall",
    "supermarket",
    "train_station",
    "bus_station",
    "subway_station",
]

# (lat, lng, place_type, radius) -> raw rows in the legacy nearby-search shape
SearchFn = Callable[[float, float, str, float], Awaitable[List[Dict[str, Any]]]]


class SafePlace(BaseModel):
    id: str
    name: str
    address: str
    lat: float
    lng: float
    type: str
    rating: Optional[float] = None
    open_now: Optional[bool] = None
    icon: Optional[str] = None


def place_from_row(row: Dict[str, Any], place_type: str) -> SafePlace:
    location = (row.get("geometry") or {}).get("location") or {}
    hours = row.get("opening_hours") or {}
    return SafePlace(
        id=str(row["place_id"]),
        name=row.get("name") or "Unknown",
        address=row.get("vicinity") or row.get("formatted_address") or "",
        lat=location.get("lat") or 0,
        lng=location.get("lng") or 0,
        type=place_type,
        rating=row.get("rating"),
        open_now=hours.get("open_now"),
        icon=row.get("icon"),
    )


def fallback_places(lat: float, lng: float) -> List[SafePlace]:
    """Static entries offset from the query point"""
    return [
        SafePlace(id="static-hospital", name="General Hospital", address="Main Ave",
                  lat=lat, lng=lng + 0.01, type="hospital"),
        SafePlace(id="static-police", name="City Police HQ", address="3rd Street",
                  lat=lat + 0.008, lng=lng - 0.008, type="police"),
        SafePlace(id="static-school", name="Central High School", address="School Rd",
                  lat=lat - 0.006, lng=lng + 0.006, type="school"),
        SafePlace(id="static-university", name="City University", address="Campus Way",
                  lat=lat + 0.012, lng=lng + 0.004, type="university"),
    ]


def build_directions_url(origin_lat: float, origin_lng: float, dest_lat: float, dest_lng: float) -> str:
    params = urlencode({
        "api": "1",
        "origin": f"{origin_lat},{origin_lng}",
        "destination": f"{dest_lat},{dest_lng}",
    })
    return f"https://www.google.com/maps/dir/?{params}"


class PlacesLookup:
    """Fan-out safe-place search with per-category failure isolation"""

    def __init__(self, search: SearchFn, categories: Optional[List[str]] = None):
        self.search = search
        self.categories = list(categories or SAFE_TYPES)

    async def _search_category(self, lat: float, lng: float, place_type: str, radius: float) -> List[SafePlace]:
        rows = await self.search(lat, lng, place_type, radius)
        places = []
        for row in rows:
            if not row.get("place_id"):
                continue
            places.append(place_from_row(row, place_type))
        return places

    async def fetch_nearby_safe_places(self, lat: float, lng: float, radius: float = 5000) -> List[SafePlace]:
        outcomes = await asyncio.gather(
            *(self._search_category(lat, lng, t, radius) for t in self.categories),
            return_exceptions=True
        )

        merged: Dict[str, SafePlace] = {}
        had_success = False
        for place_type, outcome in zip(self.categories, outcomes):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                logger.warning(f"Places fetch failed for type {place_type}: {outcome}")
                continue
            had_success = True
            for place in outcome:
                merged.setdefault(place.id, place)

        if merged or had_success:
            return list(merged.values())

        logger.info("All place searches failed, using static fallback")
        return fallback_places(lat, lng)
