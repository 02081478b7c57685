"""
Alert Poller - watches one user's alert flag and raises a local alarm on green -> red

States:
- idle: nothing monitored
- monitoring(phone, last_known_status): a ticker polls GET /api/users/{phone}/alerts

start(phone) always begins from last_known_status = green, so a user who is
already red when monitoring starts is only alerted after a green reading is
followed by a red one.

Each tick runs its check as an independent task: a slow request may overlap
the next tick, and the most recent successful read sets last_known_status.
Poll failures are logged and otherwise ignored until the next tick.
"""
import asyncio
import logging
from typing import Optional, Set

from disaster_alert.client.api_client import AlertApiClient, ApiError
from disaster_alert.client.models import AlertStatus, PermissionState, Severity
from disaster_alert.client.notifier import LogNotifier, PlatformNotifier
from disaster_alert.client.state import AppStore
from disaster_alert.models import AlertLevel

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 30.0

RED_ALERT_TOAST_TITLE = "🚨 DANGER ALERT"
RED_ALERT_TOAST_TEXT = "Emergency situation detected in your area! Please check notifications for details."
RED_ALERT_TITLE = "🚨 Emergency Alert"
RED_ALERT_MESSAGE = "Danger has been detected in your area. Please stay alert and follow emergency procedures."
RED_ALERT_PLATFORM_TEXT = "Danger detected in your area! Check the app for details."

WRITE_FAILED_TEXT = "Could not update alert status. Please try again or call emergency services."


class MonitoringSession:
    """Edge detector for one monitored phone"""

    def __init__(self, phone: str):
        self.phone = phone
        self.last_known_status = AlertLevel.green

    def observe(self, status: AlertLevel) -> bool:
        """Record a successful read. Returns True only on a green -> red edge."""
        status = AlertLevel(status)
        fired = self.last_known_status == AlertLevel.green and status == AlertLevel.red
        self.last_known_status = status
        return fired


class PollHandle:
    """Token returned by AlertPoller.start; cancelling it stops that session only"""

    def __init__(self, poller: "AlertPoller", session: MonitoringSession):
        self._poller = poller
        self._session = session

    @property
    def phone(self) -> str:
        return self._session.phone

    @property
    def active(self) -> bool:
        return self._poller._session is self._session

    def cancel(self) -> None:
        self._poller.stop(self)


class AlertPoller:
    """Polls alert status for one phone at a time and reacts to red alerts"""

    def __init__(
        self,
        api: AlertApiClient,
        store: AppStore,
        notifier: Optional[PlatformNotifier] = None,
        interval: float = DEFAULT_POLL_INTERVAL,
        danger_radius: float = 1000.0,
    ):
        self.api = api
        self.store = store
        self.notifier = notifier or LogNotifier()
        self.interval = interval
        self.danger_radius = danger_radius

        self._session: Optional[MonitoringSession] = None
        self._ticker: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()
        self._background: Set[asyncio.Task] = set()
        self._permission_requested = False

    @property
    def state(self) -> str:
        return "monitoring" if self._session else "idle"

    @property
    def phone(self) -> Optional[str]:
        return self._session.phone if self._session else None

    @property
    def last_known_status(self) -> Optional[AlertLevel]:
        return self._session.last_known_status if self._session else None

    def start(self, phone: str) -> PollHandle:
        """
        Begin monitoring a phone, replacing any current session.

        Must be called from a running event loop. The first check is issued
        immediately; later ones every `interval` seconds.
        """
        self.stop()

        session = MonitoringSession(phone)
        self._session = session
        self._launch_check(session)
        self._ticker = asyncio.get_running_loop().create_task(self._tick(session))

        logger.info(f"Started alert monitoring for user: {phone}")
        return PollHandle(self, session)

    def stop(self, handle: Optional[PollHandle] = None) -> None:
        """
        Stop monitoring. Idempotent.

        With a handle, only stops if that handle's session is still current.
        No fetch is issued after this returns.
        """
        if handle is not None and not handle.active:
            return
        if self._session is None and self._ticker is None:
            return

        if self._ticker:
            self._ticker.cancel()
            self._ticker = None
        for task in list(self._inflight):
            task.cancel()
        self._inflight.clear()

        phone = self.phone
        self._session = None
        logger.info(f"Stopped alert monitoring for user: {phone}")

    async def check_now(self) -> None:
        """Run one check for the current session and wait for it"""
        if self._session:
            await self._check(self._session)

    async def _tick(self, session: MonitoringSession) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if session is not self._session:
                return
            self._launch_check(session)

    def _launch_check(self, session: MonitoringSession) -> None:
        task = asyncio.ensure_future(self._check(session))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _check(self, session: MonitoringSession) -> None:
        try:
            status = await self.api.get_alert_status(session.phone)
        except ApiError as e:
            logger.error(f"Failed to fetch alert status: {e}")
            return
        except Exception:
            logger.exception("Error checking alerts")
            return

        if status is None:
            logger.warning(f"No alert record for user: {session.phone}")
            return
        if session is not self._session:
            logger.debug(f"Discarding alert status for replaced session {session.phone}")
            return

        self._apply(session, status)

    def _apply(self, session: MonitoringSession, status: AlertStatus) -> None:
        fired = session.observe(status.alertStatus)
        self.store.set_alert_status(status)

        if fired:
            self._handle_red_alert(status)
        elif status.alertStatus == AlertLevel.green and self.store.state.is_danger_active:
            self.store.set_danger_active(False)
            self.store.clear_danger_zones()

    def _handle_red_alert(self, status: AlertStatus) -> None:
        logger.warning(f"RED ALERT DETECTED for {status.phone}")

        self.store.push_toast(
            title=RED_ALERT_TOAST_TITLE,
            description=RED_ALERT_TOAST_TEXT,
            variant="destructive",
            duration_ms=10000,
        )

        location = self.store.state.user_location
        center = (location.lat, location.lng) if location else None
        self.store.add_notification(
            title=RED_ALERT_TITLE,
            message=RED_ALERT_MESSAGE,
            severity=Severity.critical,
            timestamp=status.timestamp,
            read=False,
            location=center,
        )

        self.store.set_danger_active(True)
        if center:
            self.store.add_danger_zone(
                center=center,
                radius=self.danger_radius,
                intensity=1.0,
                timestamp=status.timestamp,
            )
        else:
            logger.debug("No user location, danger overlay has no zone to draw")

        task = asyncio.ensure_future(self._notify_platform())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _notify_platform(self) -> None:
        try:
            permission = self.notifier.permission
            if permission == PermissionState.default and not self._permission_requested:
                # Asked at most once per poller, never on every tick
                self._permission_requested = True
                permission = await self.notifier.request_permission()

            if permission == PermissionState.granted:
                self.notifier.show(
                    RED_ALERT_TITLE,
                    RED_ALERT_PLATFORM_TEXT,
                    tag="emergency-alert",
                    require_interaction=True,
                )
        except Exception:
            logger.exception("Platform notification failed")

    async def update_alert_status(self, phone: str, alert_status: AlertLevel) -> bool:
        """Explicit status write. Shows a failure toast and returns False on error."""
        try:
            result = await self.api.update_alert_status(phone, alert_status)
        except ApiError as e:
            logger.error(f"Error updating alert status: {e}")
            self.store.push_toast(
                title="Update failed",
                description=WRITE_FAILED_TEXT,
                variant="destructive",
            )
            return False

        logger.info(f"Alert status updated: {result}")
        return True
