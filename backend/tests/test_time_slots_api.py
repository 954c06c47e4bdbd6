def create_slot(client, day="Monday", start="09:00:00", end="10:00:00", name="Period 1", **extra):
    payload = {"day_of_week": day, "start_time": start, "end_time": end, "slot_name": name, **extra}
    return client.post("/api/time-slots/", json=payload, headers={"X-Actor-Id": "admin-1"})


def test_create_and_fetch_time_slot(client):
    created = create_slot(client, day="monday", start="9:00:00", end="10:30:00")
    assert created.status_code == 201, created.text
    body = created.json()
    assert body["day_of_week"] == "Monday"
    assert body["start_time"] == "09:00:00"
    assert body["end_time"] == "10:30:00"
    assert body["slot_type"] == "regular"
    assert body["is_active"] is True

    fetched = client.get(f"/api/time-slots/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == body


def test_duplicate_and_overlap_are_conflicts(client):
    assert create_slot(client).status_code == 201

    duplicate = create_slot(client, name="Copy")
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "duplicate_slot"

    overlapping = create_slot(client, start="09:30:00", end="10:30:00", name="Shifted")
    assert overlapping.status_code == 409
    assert overlapping.json()["code"] == "overlapping_slot"

    adjacent = create_slot(client, start="10:00:00", end="11:00:00", name="Period 2")
    assert adjacent.status_code == 201


def test_invalid_range_and_malformed_time(client):
    backwards = create_slot(client, start="11:00:00", end="10:00:00")
    assert backwards.status_code == 422
    assert backwards.json()["code"] == "invalid_range"

    malformed = create_slot(client, start="9am")
    assert malformed.status_code == 422

    bad_day = create_slot(client, day="Funday")
    assert bad_day.status_code == 422


def test_update_time_slot(client):
    first = create_slot(client).json()
    second = create_slot(client, start="10:00:00", end="11:00:00", name="Period 2").json()

    widened = client.put(f"/api/time-slots/{first['id']}", json={"start_time": "08:30:00"})
    assert widened.status_code == 200
    assert widened.json()["start_time"] == "08:30:00"

    clash = client.put(f"/api/time-slots/{second['id']}", json={"start_time": "09:45:00"})
    assert clash.status_code == 409
    assert clash.json()["code"] == "overlapping_slot"

    empty = client.put(f"/api/time-slots/{second['id']}", json={})
    assert empty.status_code == 422
    assert empty.json()["code"] == "validation_failed"

    missing = client.put("/api/time-slots/9999", json={"slot_name": "Ghost"})
    assert missing.status_code == 404
    assert missing.json()["code"] == "not_found"


def test_listing_filters_and_day_view(client):
    create_slot(client, day="Tuesday", start="08:00:00", end="09:00:00", name="Tue 1")
    create_slot(client, day="Monday", start="13:00:00", end="14:00:00", name="Mon 3")
    create_slot(client, day="Monday", start="08:00:00", end="09:00:00", name="Mon 1")
    create_slot(client, day="Monday", start="10:00:00", end="10:15:00", name="Tea", slot_type="break")
    inactive = create_slot(client, day="Monday", start="15:00:00", end="16:00:00", name="Mon 4").json()
    client.post(f"/api/time-slots/{inactive['id']}/deactivate")

    everything = client.get("/api/time-slots/").json()
    assert [slot["slot_name"] for slot in everything] == ["Mon 1", "Tea", "Mon 3", "Mon 4", "Tue 1"]

    monday_active = client.get("/api/time-slots/by-day/monday").json()
    assert [slot["slot_name"] for slot in monday_active] == ["Mon 1", "Tea", "Mon 3"]

    schedulable = client.get("/api/time-slots/available", params={"day": "Monday"}).json()
    assert [slot["slot_name"] for slot in schedulable] == ["Mon 1", "Mon 3"]

    breaks = client.get("/api/time-slots/", params={"slot_type": "break"}).json()
    assert [slot["slot_name"] for slot in breaks] == ["Tea"]

    inactive_only = client.get("/api/time-slots/", params={"is_active": "false"}).json()
    assert [slot["slot_name"] for slot in inactive_only] == ["Mon 4"]

    stats = client.get("/api/time-slots/statistics").json()
    assert stats["total_slots"] == 5
    assert stats["inactive_slots"] == 1
    assert stats["break_slots"] == 1

    assert client.get("/api/time-slots/by-day/Funday").status_code == 422


def test_activate_and_deactivate(client):
    slot = create_slot(client).json()

    off = client.post(f"/api/time-slots/{slot['id']}/deactivate")
    assert off.status_code == 200
    assert off.json()["is_active"] is False

    on = client.post(f"/api/time-slots/{slot['id']}/activate")
    assert on.status_code == 200
    assert on.json()["is_active"] is True


def test_delete_unreferenced_time_slot(client):
    slot = create_slot(client).json()

    deleted = client.delete(f"/api/time-slots/{slot['id']}")
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True}
    assert client.get(f"/api/time-slots/{slot['id']}").status_code == 404
    assert client.delete(f"/api/time-slots/{slot['id']}").status_code == 404
