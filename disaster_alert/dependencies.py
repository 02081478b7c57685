"""
FastAPI dependencies for the Disaster Alert service
"""
from fastapi import Request

from disaster_alert.db import RecordStore
from disaster_alert.services.assistant_service import AssistantService, assistant_service
from disaster_alert.services.places_service import PlacesService, places_service


def get_store(request: Request) -> RecordStore:
    """Record store created at startup and owned by the application"""
    return request.app.state.store


def get_places_service() -> PlacesService:
    return places_service


def get_assistant_service() -> AssistantService:
    return assistant_service
