"""
Services package - Business logic layer
"""
from disaster_alert.services.places_service import places_service, PlacesUpstreamError
from disaster_alert.services.assistant_service import assistant_service

__all__ = [
    "places_service",
    "assistant_service",
    "PlacesUpstreamError",
]
