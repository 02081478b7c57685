"""
Client composition root: wires the API client, state store, alert poller and
places lookup together and implements the user-facing flows.
"""
import logging
from typing import Optional

from disaster_alert.client.alert_poller import AlertPoller
from disaster_alert.client.api_client import AlertApiClient, ApiError
from disaster_alert.client.models import SafeZone, UserLocation, UserProfile
from disaster_alert.client.notifier import PlatformNotifier
from disaster_alert.client.places_lookup import PlacesLookup, SafePlace
from disaster_alert.client.profile_storage import ProfileStorage
from disaster_alert.client.seed import load_demo_data
from disaster_alert.client.state import AppStore
from disaster_alert.config import Settings, settings as default_settings
from disaster_alert.models import utc_now_iso

logger = logging.getLogger(__name__)

SOS_FAILED_TEXT = (
    "Failed to send SOS alert. Please call emergency services directly."
)
PROFILE_FAILED_TEXT = (
    "Could not save your details. Please try again or call emergency services if you need help now."
)
PROFILE_LOCAL_ONLY_TEXT = "Your details were saved on this device but could not reach the server yet."


def _safe_zone(place: SafePlace) -> SafeZone:
    tags = [place.type]
    if place.open_now:
        tags.append("open")
    return SafeZone(
        id=place.id,
        name=place.name,
        type=place.type,
        coordinates=(place.lat, place.lng),
        available=place.open_now is not False,
        tags=tags,
    )


class DisasterAlertClient:
    """User-facing flows of the disaster alert app"""

    def __init__(
        self,
        api: Optional[AlertApiClient] = None,
        store: Optional[AppStore] = None,
        notifier: Optional[PlatformNotifier] = None,
        settings: Optional[Settings] = None,
        profile_storage: Optional[ProfileStorage] = None,
        demo_data: Optional[bool] = None,
    ):
        self.settings = settings or default_settings
        self.api = api or AlertApiClient(self.settings.API_BASE_URL)
        self.store = store or AppStore()
        if profile_storage is None and self.settings.CLIENT_PROFILE_PATH:
            profile_storage = ProfileStorage(self.settings.CLIENT_PROFILE_PATH)
        self.profile_storage = profile_storage

        if demo_data is None:
            demo_data = self.settings.CLIENT_DEMO_DATA
        if demo_data:
            load_demo_data(self.store)

        self.poller = AlertPoller(
            self.api,
            self.store,
            notifier=notifier,
            interval=self.settings.ALERT_POLL_INTERVAL_SEC,
        )
        self.places = PlacesLookup(self.api.search_nearby_places)

    async def aclose(self) -> None:
        self.poller.stop()
        await self.api.aclose()

    async def complete_onboarding(
        self,
        phone: str,
        email: str,
        city: str,
        locality: str,
        full_address: str,
    ) -> UserProfile:
        """Save the user's details, keep them as the profile and start alert monitoring"""
        timestamp = utc_now_iso()
        try:
            await self.api.create_or_update_user(phone, email, city, locality, full_address, timestamp)
        except ApiError as e:
            logger.error(f"Error saving user: {e}")
            self.store.push_toast("Save failed", PROFILE_FAILED_TEXT, variant="destructive")
            raise

        profile = UserProfile(
            phone=phone,
            email=email,
            city=city,
            locality=locality,
            full_address=full_address,
            last_updated=timestamp,
        )
        self.store.set_user_profile(profile)
        self._save_profile_locally(profile)
        self.poller.start(phone)
        return profile

    def restore_profile(self) -> Optional[UserProfile]:
        """
        Load the locally saved profile, if any, and resume alert monitoring for it.

        Must be called from a running event loop.
        """
        if self.profile_storage is None:
            return None
        profile = self.profile_storage.load()
        if profile is None:
            return None

        self.store.set_user_profile(profile)
        self.poller.start(profile.phone)
        logger.info(f"Restored saved profile for {profile.phone}")
        return profile

    async def update_profile(self, **fields) -> UserProfile:
        """
        Change profile fields, push the server-side ones to the API and keep a
        local copy. The local copy is saved even when the API call fails.
        """
        current = self.store.state.user_profile
        if current is None:
            raise ValueError("No profile to update, complete onboarding first")

        profile = current.model_copy(update={**fields, "last_updated": utc_now_iso()})
        self.store.set_user_profile(profile)
        self._save_profile_locally(profile)

        try:
            await self.api.create_or_update_user(
                profile.phone, profile.email, profile.city, profile.locality,
                profile.full_address, profile.last_updated
            )
        except ApiError as e:
            logger.warning(f"API save failed, profile kept locally: {e}")
            self.store.push_toast("Saved on this device", PROFILE_LOCAL_ONLY_TEXT)

        if profile.phone != current.phone:
            self.poller.start(profile.phone)
        return profile

    def _save_profile_locally(self, profile: UserProfile) -> None:
        if self.profile_storage is None:
            return
        try:
            self.profile_storage.save(profile)
        except OSError as e:
            logger.error(f"Could not save profile locally: {e}")

    def update_location(self, lat: float, lng: float, accuracy: Optional[float] = None) -> None:
        self.store.set_user_location(UserLocation(lat=lat, lng=lng, accuracy=accuracy))
        self.store.set_location_permission(True)

    async def send_sos(self, lat: float, lng: float, accuracy: Optional[float] = None) -> bool:
        """
        Report an SOS for the current profile.

        There is no automatic retry: on failure the user is told to call
        emergency services directly.
        """
        profile = self.store.state.user_profile
        if profile is None:
            self.store.push_toast("SOS failed", SOS_FAILED_TEXT, variant="destructive")
            return False

        try:
            result = await self.api.send_sos(profile.phone, lat, lng, accuracy, utc_now_iso())
        except ApiError as e:
            logger.error(f"Error sending SOS: {e}")
            self.store.push_toast("SOS failed", SOS_FAILED_TEXT, variant="destructive", duration_ms=10000)
            return False

        self.store.push_toast(
            "SOS sent",
            f"Your location ({result.get('coordinates')}) was shared with responders.",
        )
        return True

    async def refresh_safe_places(self, radius: float = 5000) -> list:
        """Look up safe places around the stored location and publish them as safe zones"""
        location = self.store.state.user_location
        if location is None:
            logger.info("No user location yet, skipping safe place lookup")
            return []

        places = await self.places.fetch_nearby_safe_places(location.lat, location.lng, radius)
        self.store.set_safe_zones([_safe_zone(p) for p in places])
        return places
