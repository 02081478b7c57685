import pytest

from disaster_alert.client.api_client import ApiError
from disaster_alert.client.app import PROFILE_LOCAL_ONLY_TEXT, DisasterAlertClient
from disaster_alert.client.models import AlertStatus, UserProfile
from disaster_alert.client.profile_storage import ProfileStorage
from disaster_alert.client.seed import DEMO_NOTIFICATIONS
from disaster_alert.config import Settings


class StubApi:
    def __init__(self, fail_saves=False):
        self.fail_saves = fail_saves
        self.saved = []

    async def create_or_update_user(self, phone, email, city, locality, full_address, timestamp=None):
        if self.fail_saves:
            raise ApiError("POST /api/users failed", 503)
        self.saved.append((phone, email, city, locality, full_address))
        return {"message": "User created", "phone": phone, "created": True}

    async def get_alert_status(self, phone):
        return AlertStatus(phone=phone, alertStatus="green", timestamp="t")

    async def search_nearby_places(self, lat, lng, place_type, radius=5000):
        return []

    async def aclose(self):
        pass


def make_profile(**overrides):
    fields = {
        "phone": "9999999999",
        "email": "user@example.com",
        "city": "Ludhiana",
        "locality": "Model Town",
        "full_address": "12 Mall Road",
    }
    fields.update(overrides)
    return UserProfile(**fields)


@pytest.fixture
def storage(tmp_path):
    return ProfileStorage(tmp_path / "profile.json")


def test_storage_round_trip(storage):
    assert storage.load() is None
    storage.save(make_profile(name="Asha"))
    assert storage.load() == make_profile(name="Asha")

    storage.clear()
    assert storage.load() is None


def test_corrupt_profile_file_is_ignored(storage):
    storage.path.write_text("{not json", encoding="utf-8")
    assert storage.load() is None


async def test_onboarding_saves_local_copy(storage):
    client = DisasterAlertClient(api=StubApi(), settings=Settings(), profile_storage=storage)
    profile = await client.complete_onboarding("9999999999", "user@example.com", "Ludhiana", "Model Town", "12 Mall Road")
    await client.aclose()

    assert storage.load() == profile


async def test_restore_profile_resumes_monitoring(storage):
    storage.save(make_profile())
    client = DisasterAlertClient(api=StubApi(), settings=Settings(), profile_storage=storage)

    profile = client.restore_profile()
    assert profile.phone == "9999999999"
    assert client.store.state.user_profile == profile
    assert client.poller.state == "monitoring"
    assert client.poller.phone == "9999999999"
    await client.aclose()


async def test_restore_without_saved_profile(storage):
    client = DisasterAlertClient(api=StubApi(), settings=Settings(), profile_storage=storage)
    assert client.restore_profile() is None
    assert client.poller.state == "idle"


async def test_profile_path_setting_enables_storage(tmp_path):
    path = tmp_path / "nested" / "profile.json"
    client = DisasterAlertClient(api=StubApi(), settings=Settings(CLIENT_PROFILE_PATH=str(path)))
    await client.complete_onboarding("9999999999", "user@example.com", "Ludhiana", "Model Town", "12 Mall Road")
    await client.aclose()

    assert path.exists()


async def test_update_profile_pushes_and_saves(storage):
    api = StubApi()
    client = DisasterAlertClient(api=api, settings=Settings(), profile_storage=storage)
    await client.complete_onboarding("9999999999", "user@example.com", "Ludhiana", "Model Town", "12 Mall Road")

    profile = await client.update_profile(city="Amritsar", name="Asha")
    await client.aclose()

    assert profile.city == "Amritsar"
    assert api.saved[-1][2] == "Amritsar"
    assert storage.load().name == "Asha"


async def test_update_profile_kept_locally_when_api_fails(storage):
    api = StubApi()
    client = DisasterAlertClient(api=api, settings=Settings(), profile_storage=storage)
    await client.complete_onboarding("9999999999", "user@example.com", "Ludhiana", "Model Town", "12 Mall Road")

    api.fail_saves = True
    await client.update_profile(locality="Civil Lines")
    await client.aclose()

    assert storage.load().locality == "Civil Lines"
    assert client.store.state.toasts[-1].description == PROFILE_LOCAL_ONLY_TEXT


async def test_update_profile_requires_onboarding():
    client = DisasterAlertClient(api=StubApi(), settings=Settings())
    with pytest.raises(ValueError):
        await client.update_profile(city="Amritsar")


def test_demo_data_seeds_zones_and_notifications():
    client = DisasterAlertClient(api=StubApi(), settings=Settings(), demo_data=True)
    state = client.store.state

    assert [z.type for z in state.disaster_zones] == ["flood"]
    assert [n.title for n in state.notifications] == [n[0] for n in DEMO_NOTIFICATIONS]
    assert state.unread_count == sum(1 for n in DEMO_NOTIFICATIONS if not n[4])


def test_demo_data_setting():
    client = DisasterAlertClient(api=StubApi(), settings=Settings(CLIENT_DEMO_DATA=True))
    assert client.store.state.disaster_zones

    plain = DisasterAlertClient(api=StubApi(), settings=Settings())
    assert plain.store.state.disaster_zones == []
    assert plain.store.state.notifications == []
