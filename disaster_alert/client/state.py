"""
Client State Store

An observable holder of one immutable AppState snapshot. Actions replace the
snapshot and notify subscribers; a subscriber registered with a selector is
only called when its selected slice changes.

The store is a plain object: create one per client and pass it to whatever
needs it.
"""
import itertools
import logging
from typing import Any, Callable, List, Optional, Tuple

from disaster_alert.client.models import (
    AlertStatus,
    AppState,
    DangerZone,
    DisasterZone,
    EmergencyContact,
    Notification,
    SafeZone,
    Severity,
    Toast,
    UserLocation,
    UserProfile,
)
from disaster_alert.client.seed import DEFAULT_EMERGENCY_CONTACTS
from disaster_alert.models import utc_now_iso

logger = logging.getLogger(__name__)

Listener = Callable[[Any, Any], None]
Selector = Callable[[AppState], Any]


class _Subscription:
    def __init__(self, listener: Listener, selector: Optional[Selector], current: Any):
        self.listener = listener
        self.selector = selector
        self.current = current


class AppStore:
    """Reactive client state with subscribe/unsubscribe"""

    def __init__(self, emergency_contacts: Optional[List[EmergencyContact]] = None):
        contacts = DEFAULT_EMERGENCY_CONTACTS if emergency_contacts is None else emergency_contacts
        self._state = AppState(emergency_contacts=list(contacts))
        self._subscriptions: List[_Subscription] = []
        # Separate counters so ids are never reused within a store
        self._notification_ids = itertools.count(1)
        self._danger_zone_ids = itertools.count(1)
        self._toast_ids = itertools.count(1)

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, listener: Listener, selector: Optional[Selector] = None) -> Callable[[], None]:
        """
        Register a listener.

        Without a selector the listener gets (new_state, old_state) on every
        change. With one it gets (new_slice, old_slice) only when the slice
        changes. Returns an idempotent unsubscribe function.
        """
        current = selector(self._state) if selector else None
        subscription = _Subscription(listener, selector, current)
        self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        return unsubscribe

    def _set(self, **changes: Any) -> None:
        previous = self._state
        self._state = previous.model_copy(update=changes)

        for subscription in list(self._subscriptions):
            try:
                if subscription.selector is None:
                    subscription.listener(self._state, previous)
                    continue
                selected = subscription.selector(self._state)
                if selected != subscription.current:
                    old, subscription.current = subscription.current, selected
                    subscription.listener(selected, old)
            except Exception:
                logger.exception("State listener failed")

    # ------------------------------------------------------------------
    # Location & map
    # ------------------------------------------------------------------
    def set_user_location(self, location: Optional[UserLocation]) -> None:
        self._set(user_location=location)

    def set_location_permission(self, granted: bool) -> None:
        self._set(is_location_permission_granted=granted)

    def set_disaster_zones(self, zones: List[DisasterZone]) -> None:
        self._set(disaster_zones=list(zones))

    def set_safe_zones(self, zones: List[SafeZone]) -> None:
        self._set(safe_zones=list(zones))

    def set_offline_status(self, offline: bool) -> None:
        self._set(is_offline=offline)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------
    def add_notification(
        self,
        title: str,
        message: str,
        severity: Severity,
        timestamp: Optional[str] = None,
        read: bool = False,
        location: Optional[Tuple[float, float]] = None,
    ) -> Notification:
        """Prepend a notification with a fresh id"""
        notification = Notification(
            id=str(next(self._notification_ids)),
            title=title,
            message=message,
            severity=Severity(severity),
            timestamp=timestamp or utc_now_iso(),
            read=read,
            location=location,
        )
        self._set(
            notifications=[notification] + self._state.notifications,
            unread_count=self._state.unread_count + (0 if read else 1),
        )
        return notification

    def mark_notification_read(self, notification_id: str) -> bool:
        """Mark one notification read. Returns False if it was unknown or already read."""
        changed = False
        notifications = []
        for n in self._state.notifications:
            if n.id == notification_id and not n.read:
                n = n.model_copy(update={"read": True})
                changed = True
            notifications.append(n)

        if changed:
            self._set(notifications=notifications, unread_count=self._state.unread_count - 1)
        return changed

    def mark_all_read(self) -> None:
        if not self._state.unread_count:
            return
        self._set(
            notifications=[
                n if n.read else n.model_copy(update={"read": True})
                for n in self._state.notifications
            ],
            unread_count=0,
        )

    # ------------------------------------------------------------------
    # Toasts
    # ------------------------------------------------------------------
    def push_toast(
        self,
        title: str,
        description: str,
        variant: str = "default",
        duration_ms: int = 5000,
    ) -> Toast:
        toast = Toast(
            id=str(next(self._toast_ids)),
            title=title,
            description=description,
            variant=variant,
            duration_ms=duration_ms,
        )
        self._set(toasts=self._state.toasts + [toast])
        return toast

    def dismiss_toast(self, toast_id: str) -> None:
        self._set(toasts=[t for t in self._state.toasts if t.id != toast_id])

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------
    def set_user_profile(self, profile: Optional[UserProfile]) -> None:
        self._set(user_profile=profile)

    def update_user_profile(self, **fields: Any) -> None:
        """Merge fields into the current profile. No-op when there is no profile."""
        if self._state.user_profile is None:
            return
        self._set(user_profile=self._state.user_profile.model_copy(update=fields))

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------
    def set_alert_status(self, status: Optional[AlertStatus]) -> None:
        self._set(alert_status=status)

    def set_danger_active(self, active: bool) -> None:
        self._set(is_danger_active=active)

    def add_danger_zone(
        self,
        center: Tuple[float, float],
        radius: float,
        intensity: float = 1.0,
        color: str = "#ef4444",
        timestamp: Optional[str] = None,
    ) -> DangerZone:
        zone = DangerZone(
            id=str(next(self._danger_zone_ids)),
            center=center,
            radius=radius,
            intensity=intensity,
            color=color,
            timestamp=timestamp or utc_now_iso(),
        )
        self._set(danger_zones=self._state.danger_zones + [zone])
        return zone

    def remove_danger_zone(self, zone_id: str) -> None:
        self._set(danger_zones=[z for z in self._state.danger_zones if z.id != zone_id])

    def clear_danger_zones(self) -> None:
        self._set(danger_zones=[])
