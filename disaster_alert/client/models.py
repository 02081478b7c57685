"""
Client-side state models
"""
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from disaster_alert.models import AlertLevel


class Severity(str, Enum):
    info = "info"
    warning = "warning"
    critical = "critical"


class PermissionState(str, Enum):
    default = "default"
    granted = "granted"
    denied = "denied"


class UserLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float
    accuracy: Optional[float] = None


class DisasterZone(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: str  # flood, earthquake, wildfire, hurricane, tornado
    severity: str  # low, medium, high, critical
    coordinates: List[Tuple[float, float]]
    title: str
    description: str
    last_updated: str


class SafeZone(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: str
    coordinates: Tuple[float, float]
    capacity: int = 0
    available: bool = True
    distance: Optional[float] = None
    tags: List[str] = []
    contact: Optional[str] = None


class Notification(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    message: str
    severity: Severity
    timestamp: str
    read: bool = False
    location: Optional[Tuple[float, float]] = None


class EmergencyContact(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    phone: str
    type: str  # emergency, family, medical, authority
    icon: Optional[str] = None


class UserProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    phone: str
    email: str
    city: str
    locality: str
    full_address: str
    name: str = ""
    emergency_contact: str = ""
    medical_info: str = ""
    last_updated: Optional[str] = None


class AlertStatus(BaseModel):
    """Wire view of a user's alert flag as returned by GET /api/users/{phone}/alerts"""
    model_config = ConfigDict(frozen=True)

    phone: str
    alertStatus: AlertLevel
    timestamp: str


class DangerZone(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    center: Tuple[float, float]
    radius: float
    intensity: float = Field(1.0, ge=0, le=1)
    color: str = "#ef4444"
    timestamp: str


class Toast(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    variant: str = "default"  # default or destructive
    duration_ms: int = 5000


class AppState(BaseModel):
    """Immutable snapshot of the client state; every action produces a new one"""
    model_config = ConfigDict(frozen=True)

    # Location & map
    user_location: Optional[UserLocation] = None
    disaster_zones: List[DisasterZone] = []
    safe_zones: List[SafeZone] = []
    danger_zones: List[DangerZone] = []

    # UI state
    is_location_permission_granted: bool = False
    is_offline: bool = False

    # Emergency
    emergency_contacts: List[EmergencyContact] = []
    notifications: List[Notification] = []
    unread_count: int = 0
    toasts: List[Toast] = []

    # Profile
    user_profile: Optional[UserProfile] = None

    # Alerts
    alert_status: Optional[AlertStatus] = None
    is_danger_active: bool = False
