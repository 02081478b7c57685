"""
Models package - stored records and API schemas
"""
from disaster_alert.models.records import (
    ALERT_LEVELS,
    AlertLevel,
    AlertStatusResponse,
    AlertUpdateRequest,
    AssistantRequest,
    SOSEvent,
    SOSRequest,
    UserRecord,
    UserUpsertRequest,
    format_coordinate,
    utc_now_iso,
)

__all__ = [
    "ALERT_LEVELS",
    "AlertLevel",
    "AlertStatusResponse",
    "AlertUpdateRequest",
    "AssistantRequest",
    "SOSEvent",
    "SOSRequest",
    "UserRecord",
    "UserUpsertRequest",
    "format_coordinate",
    "utc_now_iso",
]
