"""
Client toolkit - alert polling, safe-place lookup and reactive client state
"""
from disaster_alert.client.alert_poller import AlertPoller, MonitoringSession, PollHandle
from disaster_alert.client.api_client import AlertApiClient, ApiError
from disaster_alert.client.app import DisasterAlertClient
from disaster_alert.client.notifier import LogNotifier, PlatformNotifier
from disaster_alert.client.places_lookup import PlacesLookup, SafePlace, build_directions_url
from disaster_alert.client.profile_storage import ProfileStorage
from disaster_alert.client.state import AppStore

__all__ = [
    "AlertPoller",
    "MonitoringSession",
    "PollHandle",
    "AlertApiClient",
    "ApiError",
    "DisasterAlertClient",
    "LogNotifier",
    "PlatformNotifier",
    "PlacesLookup",
    "SafePlace",
    "build_directions_url",
    "ProfileStorage",
    "AppStore",
]
