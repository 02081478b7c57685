"""
Static seed data for a fresh client
"""
from datetime import datetime, timedelta, timezone

from disaster_alert.client.models import DisasterZone, EmergencyContact, Severity

DEFAULT_EMERGENCY_CONTACTS = [
    EmergencyContact(id="1", name="Emergency Services", phone="911", type="emergency", icon="🚨"),
    EmergencyContact(id="2", name="Fire Department", phone="911", type="emergency", icon="🚒"),
    EmergencyContact(id="3", name="Police", phone="911", type="emergency", icon="👮"),
    EmergencyContact(id="4", name="Poison Control", phone="1-800-222-1222", type="medical", icon="☠️"),
]

# (title, message, severity, age, read, location)
DEMO_NOTIFICATIONS = [
    (
        "Flash Flood Warning",
        "Heavy rainfall expected in your area. Avoid low-lying areas and be prepared for flash flooding.",
        Severity.critical, timedelta(minutes=30), False, (40.7589, -73.9851),
    ),
    (
        "Evacuation Route Update",
        "Highway 95 is now reopened. Use this route for evacuation if needed.",
        Severity.info, timedelta(hours=2), False, (40.7489, -73.9851),
    ),
    (
        "Severe Weather Alert",
        "Strong winds and heavy rain expected between 2-6 PM. Secure loose outdoor items.",
        Severity.warning, timedelta(hours=4), True, (40.7389, -73.9751),
    ),
    (
        "Emergency Shelter Available",
        "Central Park Community Center is now open as an emergency shelter with capacity for 200 people.",
        Severity.info, timedelta(hours=6), True, (40.7829, -73.9654),
    ),
    (
        "System Test",
        "This is a test of the emergency notification system. No action required.",
        Severity.info, timedelta(days=1), True, None,
    ),
]


def _iso(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sample_disaster_zones():
    return [
        DisasterZone(
            id="1",
            type="flood",
            severity="high",
            coordinates=[
                (40.7589, -73.9851),
                (40.7489, -73.9851),
                (40.7489, -73.9751),
                (40.7589, -73.9751),
            ],
            title="Times Square Flood Warning",
            description=(
                "Heavy rainfall has caused street flooding in the Times Square area. "
                "Avoid the area and seek higher ground."
            ),
            last_updated=_iso(datetime.now(timezone.utc)),
        )
    ]


def load_demo_data(store) -> None:
    """Populate a store with the demo disaster zone and notification history"""
    now = datetime.now(timezone.utc)
    store.set_disaster_zones(sample_disaster_zones())
    # Oldest first so the newest ends up at the top of the list
    for title, message, severity, age, read, location in reversed(DEMO_NOTIFICATIONS):
        store.add_notification(
            title=title,
            message=message,
            severity=severity,
            timestamp=_iso(now - age),
            read=read,
            location=location,
        )
