import pytest


def test_sos_echoes_coordinate_string(client, store):
    response = client.post("/api/sos", json={"phone": "9999999999", "coordinates": [1.5, -2.5]})
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "SOS Alert saved successfully"
    assert body["phone"] == "9999999999"
    assert body["coordinates"] == "1.5, -2.5"

    events = store.list_sos_events()
    assert len(events) == 1
    assert events[0].coordinates == (1.5, -2.5)
    assert events[0].accuracy == "Unknown"
    assert events[0].status == "Active"


def test_integer_coordinates_render_without_decimals(client):
    response = client.post("/api/sos", json={"phone": "9999999999", "coordinates": [30, 75]})
    assert response.json()["coordinates"] == "30, 75"


def test_sos_keeps_accuracy_and_timestamp(client, store):
    client.post("/api/sos", json={
        "phone": "9999999999",
        "coordinates": [30.9, 75.85],
        "accuracy": 12.5,
        "timestamp": "2024-05-01T10:00:00.000Z",
    })
    event = store.list_sos_events()[0]
    assert event.accuracy == "12.5"
    assert event.timestamp == "2024-05-01T10:00:00.000Z"


def test_sos_events_are_not_deduplicated(client, store):
    payload = {"phone": "9999999999", "coordinates": [1.5, -2.5]}
    client.post("/api/sos", json=payload)
    client.post("/api/sos", json=payload)
    assert len(store.list_sos_events()) == 2


@pytest.mark.parametrize("coordinates", [
    [1.5],
    ["a", "b"],
    ["1.5", "-2.5"],
    [1.5, -2.5, 3.0],
    [True, False],
    [1.5, None],
    [],
])
def test_malformed_coordinates_rejected(client, store, coordinates):
    response = client.post("/api/sos", json={"phone": "9999999999", "coordinates": coordinates})
    assert response.status_code == 400
    assert store.list_sos_events() == []


def test_missing_phone_rejected(client, store):
    response = client.post("/api/sos", json={"coordinates": [1.5, -2.5]})
    assert response.status_code == 400
    assert store.list_sos_events() == []


def test_missing_coordinates_rejected(client):
    assert client.post("/api/sos", json={"phone": "9999999999"}).status_code == 400


def test_non_list_coordinates_rejected(client):
    response = client.post("/api/sos", json={"phone": "9999999999", "coordinates": "1.5, -2.5"})
    assert response.status_code == 400


def test_integral_accuracy_stored_without_decimals(client, store):
    client.post("/api/sos", json={"phone": "9999999999", "coordinates": [30.9, 75.85], "accuracy": 12})
    assert store.list_sos_events()[0].accuracy == "12"
