"""
Record and wire models for the Disaster Alert service
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, Field


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ============================================
# ENUMS
# ============================================
class AlertLevel(str, Enum):
    green = "green"
    red = "red"


ALERT_LEVELS = [level.value for level in AlertLevel]


# ============================================
# STORED RECORDS
# ============================================
class UserRecord(BaseModel):
    """User contact/location profile, keyed by phone."""
    phone: str
    email: str
    city: str
    locality: str
    full_address: str
    alert_status: AlertLevel = AlertLevel.green
    timestamp: str = Field(default_factory=utc_now_iso)


class SOSEvent(BaseModel):
    """Append-only emergency coordinate report."""
    phone: str
    coordinates: Tuple[float, float]
    accuracy: str = "Unknown"
    timestamp: str = Field(default_factory=utc_now_iso)
    status: str = "Active"

    @property
    def coordinates_string(self) -> str:
        lat, lng = self.coordinates
        return f"{format_coordinate(lat)}, {format_coordinate(lng)}"


def format_coordinate(value: float) -> str:
    """Render a coordinate or accuracy the way it was submitted: 2.0 -> "2", 1.5 -> "1.5"."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ============================================
# REQUEST / RESPONSE SCHEMAS
# ============================================
class UserUpsertRequest(BaseModel):
    """Body of POST /api/users. Required fields are checked by the router."""
    phone: Optional[str] = None
    email: Optional[str] = None
    city: Optional[str] = None
    locality: Optional[str] = None
    fullAddress: Optional[str] = None
    timestamp: Optional[str] = None


class AlertUpdateRequest(BaseModel):
    alertStatus: Optional[str] = None


class SOSRequest(BaseModel):
    """Body of POST /api/sos. Coordinates are validated by hand so strings are never coerced."""
    phone: Optional[str] = None
    coordinates: Optional[list] = None
    accuracy: Optional[float] = None
    timestamp: Optional[str] = None


class AlertStatusResponse(BaseModel):
    phone: str
    alertStatus: AlertLevel
    timestamp: str


class AssistantRequest(BaseModel):
    message: Optional[str] = None
