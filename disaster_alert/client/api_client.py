"""
Async HTTP client for the Disaster Alert API
"""
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from disaster_alert.client.models import AlertStatus
from disaster_alert.models import AlertLevel

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response or transport failure talking to the API"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AlertApiClient:
    """
    Thin wrapper over httpx.AsyncClient for every API endpoint.

    Every method raises ApiError on failure, except get_alert_status which
    returns None for an unknown phone.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AlertApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ApiError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            try:
                body = response.json()
                detail = body.get("detail") if isinstance(body, dict) else body
            except ValueError:
                detail = response.text
            raise ApiError(f"{method} {path} returned {response.status_code}: {detail}", response.status_code)
        return response

    @staticmethod
    def _alerts_path(phone: str) -> str:
        return f"/api/users/{quote(phone, safe='')}/alerts"

    async def health(self) -> Dict[str, Any]:
        response = await self._request("GET", "/health")
        return response.json()

    async def create_or_update_user(
        self,
        phone: str,
        email: str,
        city: str,
        locality: str,
        full_address: str,
        timestamp: Optional[str] = None
    ) -> Dict[str, Any]:
        payload = {
            "phone": phone,
            "email": email,
            "city": city,
            "locality": locality,
            "fullAddress": full_address,
        }
        if timestamp:
            payload["timestamp"] = timestamp
        response = await self._request("POST", "/api/users", json=payload)
        return response.json()

    async def get_alert_status(self, phone: str) -> Optional[AlertStatus]:
        try:
            response = await self._request("GET", self._alerts_path(phone))
        except ApiError as e:
            if e.status_code == 404:
                return None
            raise

        try:
            return AlertStatus(**response.json())
        except (ValueError, TypeError) as e:
            raise ApiError(f"Malformed alert status for {phone}: {e}") from e

    async def update_alert_status(self, phone: str, alert_status: AlertLevel) -> Dict[str, Any]:
        response = await self._request(
            "PUT",
            self._alerts_path(phone),
            json={"alertStatus": AlertLevel(alert_status).value}
        )
        return response.json()

    async def send_sos(
        self,
        phone: str,
        lat: float,
        lng: float,
        accuracy: Optional[float] = None,
        timestamp: Optional[str] = None
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"phone": phone, "coordinates": [lat, lng]}
        if accuracy is not None:
            payload["accuracy"] = accuracy
        if timestamp:
            payload["timestamp"] = timestamp
        response = await self._request("POST", "/api/sos", json=payload)
        return response.json()

    async def search_nearby_places(
        self,
        lat: float,
        lng: float,
        place_type: str,
        radius: float = 5000
    ) -> List[Dict[str, Any]]:
        """Raw provider rows for one place type. Raises ApiError when the proxy fails."""
        response = await self._request(
            "GET",
            "/api/places/nearby",
            params={"lat": lat, "lng": lng, "type": place_type, "radius": radius}
        )
        data = response.json()
        results = data.get("results")
        if not isinstance(results, list):
            raise ApiError(f"Malformed places response for {place_type}")
        return results

    async def ask_assistant(self, message: str) -> Dict[str, Any]:
        response = await self._request("POST", "/api/assistant/chat", json={"message": message})
        return response.json()
