"""
Places Service - Google Places (New) text search proxy

Converts the Places API (New) response into the legacy nearby-search shape
the map client understands:

    {"results": [{"place_id", "name", "vicinity", "formatted_address",
                  "geometry": {"location": {"lat", "lng"}}, "rating",
                  "opening_hours": {"open_now"} | None, "icon"}],
     "status": "OK" | "ZERO_RESULTS"}
"""
import asyncio
import hashlib
import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from redis.asyncio import Redis
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from disaster_alert.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

FIELD_MASK = (
    "places.id,places.displayName,places.formattedAddress,places.location,"
    "places.rating,places.regularOpeningHours,places.iconMaskBaseUri"
)


class PlacesUpstreamError(Exception):
    """Raised when the places provider cannot be reached or rejects the request"""


def normalize_place(place: Dict[str, Any]) -> Dict[str, Any]:
    """Map one Places (New) result onto the legacy nearby-search result shape"""
    location = place.get("location") or {}
    address = place.get("formattedAddress") or ""
    hours = place.get("regularOpeningHours")
    return {
        "place_id": place.get("id"),
        "name": (place.get("displayName") or {}).get("text") or "Unknown",
        "vicinity": address,
        "formatted_address": address,
        "geometry": {
            "location": {
                "lat": location.get("latitude") or 0,
                "lng": location.get("longitude") or 0,
            }
        },
        "rating": place.get("rating") or 0,
        "opening_hours": {"open_now": bool(hours.get("openNow"))} if hours else None,
        "icon": place.get("iconMaskBaseUri") or "",
    }


class PlacesService:
    """
    Proxy for nearby place searches.

    Features:
    - Text search biased to a circle around the query point
    - Retries on provider timeouts
    - Optional Redis caching, skipped when Redis is not configured or down
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings or default_settings
        self.transport = transport
        self._redis_client: Optional[Redis] = None
        self._redis_retry_at = 0.0

    async def _get_redis(self) -> Optional[Redis]:
        """Get Redis client for caching. After a failed connect, Redis is skipped until the cooldown ends."""
        if not self.settings.REDIS_URL:
            return None
        if self._redis_client is None:
            loop = asyncio.get_running_loop()
            if loop.time() < self._redis_retry_at:
                return None
            client = Redis.from_url(
                self.settings.REDIS_URL,
                socket_connect_timeout=self.settings.REDIS_TIMEOUT_SEC,
                socket_timeout=self.settings.REDIS_TIMEOUT_SEC,
                decode_responses=True
            )
            try:
                await client.ping()
            except Exception as e:
                logger.warning(f"Redis unavailable for places caching: {e}")
                self._redis_retry_at = loop.time() + self.settings.REDIS_RETRY_COOLDOWN_SEC
                await client.close()
                return None
            self._redis_client = client
        return self._redis_client

    def _get_cache_key(self, lat: float, lng: float, place_type: str, radius: float) -> str:
        raw = f"{lat:.5f}:{lng:.5f}:{place_type.lower().strip()}:{radius:.0f}"
        return f"places:{hashlib.sha256(raw.encode()).hexdigest()[:32]}"

    async def _get_cached(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            r = await self._get_redis()
            if r:
                cached = await r.get(key)
                if cached:
                    return json.loads(cached)
        except Exception as e:
            logger.warning(f"Cache read error: {e}")
        return None

    async def _set_cached(self, key: str, result: Dict[str, Any]) -> None:
        try:
            r = await self._get_redis()
            if r:
                await r.setex(key, self.settings.PLACES_CACHE_TTL_SEC, json.dumps(result))
        except Exception as e:
            logger.warning(f"Cache write error: {e}")

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=2),
        retry=retry_if_exception_type(httpx.TimeoutException),
        reraise=True
    )
    async def _search_text(self, body: Dict[str, Any]) -> Dict[str, Any]:
        headers = {
            "Content-Type": "application/json",
            "X-Goog-FieldMask": FIELD_MASK
        }
        async with httpx.AsyncClient(
            timeout=self.settings.PLACES_TIMEOUT_SEC,
            transport=self.transport
        ) as client:
            response = await client.post(
                self.settings.PLACES_API_URL,
                params={"key": self.settings.GOOGLE_MAPS_API_KEY},
                json=body,
                headers=headers
            )
            response.raise_for_status()
            return response.json()

    async def search_nearby(
        self,
        lat: float,
        lng: float,
        place_type: str,
        radius: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Search for places of one type around a point.

        Raises:
            PlacesUpstreamError: missing API key, timeout, non-2xx or bad payload
        """
        if not self.settings.GOOGLE_MAPS_API_KEY:
            raise PlacesUpstreamError("GOOGLE_MAPS_API_KEY is not configured")

        radius = radius or self.settings.PLACES_DEFAULT_RADIUS
        cache_key = self._get_cache_key(lat, lng, place_type, radius)
        cached = await self._get_cached(cache_key)
        if cached:
            logger.debug(f"Places cache hit for {place_type} near {lat},{lng}")
            return cached

        body = {
            "textQuery": f"{place_type} near {lat},{lng}",
            "locationBias": {
                "circle": {
                    "center": {"latitude": lat, "longitude": lng},
                    "radius": radius
                }
            },
            "maxResultCount": self.settings.PLACES_MAX_RESULTS
        }

        try:
            data = await self._search_text(body)
        except httpx.TimeoutException as e:
            raise PlacesUpstreamError(f"Places request timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            raise PlacesUpstreamError(
                f"Places provider returned {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise PlacesUpstreamError(f"Places request failed: {e}") from e

        places: List[Dict[str, Any]] = (data.get("places") or []) if isinstance(data, dict) else []
        if places:
            result = {"results": [normalize_place(p) for p in places], "status": "OK"}
        else:
            result = {"results": [], "status": "ZERO_RESULTS"}

        await self._set_cached(cache_key, result)
        logger.info(f"Places search '{place_type}' near {lat},{lng}: {len(result['results'])} results")
        return result


# Singleton instance
places_service = PlacesService()
