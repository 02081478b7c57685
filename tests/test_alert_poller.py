import asyncio

import pytest

from disaster_alert.client.alert_poller import (
    RED_ALERT_TITLE,
    WRITE_FAILED_TEXT,
    AlertPoller,
    MonitoringSession,
)
from disaster_alert.client.api_client import ApiError
from disaster_alert.client.models import AlertStatus, PermissionState, Severity, UserLocation
from disaster_alert.client.notifier import PlatformNotifier
from disaster_alert.client.state import AppStore
from disaster_alert.models import AlertLevel


class ScriptedApi:
    """Returns queued alert readings; an Exception in the queue is raised instead"""

    def __init__(self, *readings):
        self.readings = list(readings)
        self.calls = []
        self.updates = []
        self.fail_updates = False

    async def get_alert_status(self, phone):
        self.calls.append(phone)
        item = self.readings.pop(0) if self.readings else "green"
        if isinstance(item, Exception):
            raise item
        if item is None:
            return None
        return AlertStatus(phone=phone, alertStatus=item, timestamp=f"t{len(self.calls)}")

    async def update_alert_status(self, phone, level):
        if self.fail_updates:
            raise ApiError("PUT failed", 500)
        self.updates.append((phone, level))
        return {"message": "Alert status updated", "phone": phone, "alertStatus": level}


class RecordingNotifier(PlatformNotifier):
    def __init__(self, permission=PermissionState.default, grant=PermissionState.granted):
        self._permission = permission
        self.grant = grant
        self.requests = 0
        self.shown = []

    @property
    def permission(self):
        return self._permission

    async def request_permission(self):
        self.requests += 1
        self._permission = self.grant
        return self._permission

    def show(self, title, body, tag="", require_interaction=False):
        self.shown.append((title, tag, require_interaction))


async def drain(poller):
    while poller._inflight or poller._background:
        await asyncio.gather(*poller._inflight, *poller._background, return_exceptions=True)


def make_poller(api, notifier=None, interval=3600):
    return AlertPoller(api, AppStore(), notifier=notifier or RecordingNotifier(), interval=interval)


def test_session_fires_only_on_green_to_red_edge():
    session = MonitoringSession("1")
    fired = [session.observe(s) for s in ["green", "red", "red", "green", "red"]]
    assert fired == [False, True, False, False, True]


def test_session_starting_red_does_not_fire():
    session = MonitoringSession("1")
    session.last_known_status = AlertLevel.red
    assert session.observe("red") is False


async def test_alarm_raised_once_per_transition():
    api = ScriptedApi("green", "red", "red", "green", "red")
    poller = make_poller(api)
    poller.start("9999999999")
    await drain(poller)
    for _ in range(4):
        await poller.check_now()
        await drain(poller)

    critical = [n for n in poller.store.state.notifications if n.severity == Severity.critical]
    assert len(critical) == 2
    assert all(n.title == RED_ALERT_TITLE for n in critical)
    assert poller.last_known_status == AlertLevel.red
    poller.stop()


async def test_red_alert_effects():
    api = ScriptedApi("red")
    notifier = RecordingNotifier()
    poller = make_poller(api, notifier)
    poller.store.set_user_location(UserLocation(lat=30.9, lng=75.85))

    poller.start("9999999999")
    await drain(poller)

    state = poller.store.state
    assert state.is_danger_active
    assert state.alert_status.alertStatus == AlertLevel.red
    assert state.unread_count == 1
    assert state.notifications[0].location == (30.9, 75.85)
    assert state.notifications[0].timestamp == "t1"
    assert [z.center for z in state.danger_zones] == [(30.9, 75.85)]
    assert state.toasts[-1].variant == "destructive"
    assert notifier.shown == [(RED_ALERT_TITLE, "emergency-alert", True)]
    poller.stop()


async def test_red_without_location_still_sets_danger():
    poller = make_poller(ScriptedApi("red"))
    poller.start("1")
    await drain(poller)

    assert poller.store.state.is_danger_active
    assert poller.store.state.danger_zones == []
    assert poller.store.state.notifications[0].location is None
    poller.stop()


async def test_green_after_red_clears_danger():
    poller = make_poller(ScriptedApi("red", "green"))
    poller.store.set_user_location(UserLocation(lat=1, lng=2))
    poller.start("1")
    await drain(poller)
    await poller.check_now()

    assert not poller.store.state.is_danger_active
    assert poller.store.state.danger_zones == []
    poller.stop()


async def test_failed_polls_keep_last_status():
    api = ScriptedApi("green", ApiError("boom", 500), None, "red")
    poller = make_poller(api)
    poller.start("1")
    await drain(poller)
    await poller.check_now()
    await poller.check_now()
    assert poller.last_known_status == AlertLevel.green
    assert poller.store.state.notifications == []

    await poller.check_now()
    await drain(poller)
    assert len(poller.store.state.notifications) == 1
    poller.stop()


async def test_unexpected_error_is_contained():
    poller = make_poller(ScriptedApi(RuntimeError("socket closed"), "red"))
    poller.start("1")
    await drain(poller)
    assert poller.state == "monitoring"

    await poller.check_now()
    await drain(poller)
    assert poller.store.state.is_danger_active
    poller.stop()


async def test_permission_requested_once_and_denial_respected():
    api = ScriptedApi("red", "green", "red")
    notifier = RecordingNotifier(grant=PermissionState.denied)
    poller = make_poller(api, notifier)

    poller.start("1")
    await drain(poller)
    await poller.check_now()
    await poller.check_now()
    await drain(poller)

    assert notifier.requests == 1
    assert notifier.shown == []
    assert len(poller.store.state.notifications) == 2
    poller.stop()


async def test_ticker_polls_repeatedly():
    api = ScriptedApi()
    poller = make_poller(api, interval=0.01)
    poller.start("1")
    await asyncio.sleep(0.1)
    poller.stop()

    assert len(api.calls) >= 3


async def test_stop_halts_polling():
    api = ScriptedApi()
    poller = make_poller(api, interval=0.01)
    poller.start("1")
    await asyncio.sleep(0.03)
    poller.stop()
    poller.stop()
    count = len(api.calls)

    await asyncio.sleep(0.05)
    assert len(api.calls) == count
    assert poller.state == "idle"
    assert poller.phone is None


async def test_restart_replaces_session():
    api = ScriptedApi()
    poller = make_poller(api)
    first = poller.start("111")
    second = poller.start("222")
    await drain(poller)

    assert not first.active
    assert second.active
    assert poller.phone == "222"
    assert poller.last_known_status == AlertLevel.green

    # A stale handle must not stop the newer session
    first.cancel()
    assert poller.state == "monitoring"
    second.cancel()
    assert poller.state == "idle"


async def test_result_for_replaced_session_is_discarded():
    release = asyncio.Event()

    class SlowApi(ScriptedApi):
        async def get_alert_status(self, phone):
            if phone == "111":
                await release.wait()
                return AlertStatus(phone=phone, alertStatus="red", timestamp="late")
            return await super().get_alert_status(phone)

    api = SlowApi()
    poller = make_poller(api)
    poller.start("111")
    slow = list(poller._inflight)
    await asyncio.sleep(0)

    # Keep the old check alive past the restart so its result arrives late
    for task in slow:
        poller._inflight.discard(task)
    poller.start("222")
    release.set()
    await asyncio.gather(*slow)
    await drain(poller)

    assert poller.phone == "222"
    assert not poller.store.state.is_danger_active
    assert poller.store.state.alert_status.phone == "222"
    poller.stop()


async def test_update_alert_status_success():
    api = ScriptedApi()
    poller = make_poller(api)
    assert await poller.update_alert_status("1", AlertLevel.red)
    assert api.updates == [("1", AlertLevel.red)]
    assert poller.store.state.toasts == []


async def test_update_alert_status_failure_shows_toast():
    api = ScriptedApi()
    api.fail_updates = True
    poller = make_poller(api)

    assert not await poller.update_alert_status("1", AlertLevel.red)
    toast = poller.store.state.toasts[-1]
    assert toast.description == WRITE_FAILED_TEXT
    assert toast.variant == "destructive"


@pytest.mark.parametrize("permission", [PermissionState.granted, PermissionState.denied])
async def test_no_request_when_permission_already_decided(permission):
    notifier = RecordingNotifier(permission=permission)
    poller = make_poller(ScriptedApi("red"), notifier)
    poller.start("1")
    await drain(poller)

    assert notifier.requests == 0
    assert len(notifier.shown) == (1 if permission == PermissionState.granted else 0)
    poller.stop()


async def test_single_alarm_on_third_read():
    api = ScriptedApi("green", "green", "red", "red", "green")
    poller = make_poller(api)
    poller.start("9999999999")
    await drain(poller)

    fired_at = []
    for read in range(2, 6):
        before = poller.store.state.unread_count
        await poller.check_now()
        await drain(poller)
        if poller.store.state.unread_count > before:
            fired_at.append(read)

    assert fired_at == [3]
    assert len(api.calls) == 5
    assert poller.last_known_status == AlertLevel.green
    poller.stop()
