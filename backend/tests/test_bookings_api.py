from datetime import date

YEAR = date.today().year
ACADEMIC_YEAR = f"{YEAR}-{YEAR + 1}"
ADMIN = {"X-Actor-Id": "admin-1"}


def create_classroom(client, room_number="101", capacity=40, **extra):
    payload = {"room_number": room_number, "building": "Main", "capacity": capacity, **extra}
    response = client.post("/api/classrooms/", json=payload, headers=ADMIN)
    assert response.status_code == 201, response.text
    return response.json()


def create_slot(client, day="Monday", start="09:00:00", end="10:00:00", name="Period"):
    payload = {"day_of_week": day, "start_time": start, "end_time": end, "slot_name": name}
    response = client.post("/api/time-slots/", json=payload, headers=ADMIN)
    assert response.status_code == 201, response.text
    return response.json()


def create_booking(client, classroom_id, slot_id, **extra):
    payload = {
        "classroom_id": classroom_id,
        "slot_id": slot_id,
        "academic_year": ACADEMIC_YEAR,
        "semester": 1,
        "subject_code": "CS101",
        **extra,
    }
    return client.post("/api/bookings/", json=payload, headers=ADMIN)


def check(client, resource_id, slot_id, **extra):
    payload = {
        "resource_id": resource_id,
        "slot_id": slot_id,
        "academic_year": ACADEMIC_YEAR,
        "semester": 1,
        **extra,
    }
    response = client.post("/api/availability/check", json=payload)
    assert response.status_code == 200, response.text
    return response.json()["available"]


def test_booking_lifecycle(client):
    room = create_classroom(client)
    slot = create_slot(client)
    assert check(client, room["id"], slot["id"]) is True

    created = create_booking(client, room["id"], slot["id"], faculty_id="fac-1", section="A")
    assert created.status_code == 201, created.text
    body = created.json()
    booking = body["booking"]
    assert body["warnings"] == []
    assert booking["status"] == "active"
    assert booking["academic_year"] == ACADEMIC_YEAR
    assert check(client, room["id"], slot["id"]) is False
    assert check(client, room["id"], slot["id"], exclude_booking_id=booking["id"]) is True
    assert check(client, "fac-1", slot["id"], resource_kind="faculty") is False

    fetched = client.get(f"/api/bookings/{booking['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["section"] == "A"

    updated = client.put(f"/api/bookings/{booking['id']}", json={"section": "B"}, headers=ADMIN)
    assert updated.status_code == 200, updated.text
    assert updated.json()["booking"]["section"] == "B"

    retired = client.post(f"/api/bookings/{booking['id']}/retire", headers=ADMIN)
    assert retired.status_code == 200
    assert retired.json()["status"] == "retired"
    assert retired.json()["retired_at"] is not None
    assert check(client, room["id"], slot["id"]) is True

    again = client.post(f"/api/bookings/{booking['id']}/retire")
    assert again.status_code == 409
    assert again.json()["code"] == "invalid_state"

    edit_retired = client.put(f"/api/bookings/{booking['id']}", json={"section": "C"})
    assert edit_retired.status_code == 409
    assert edit_retired.json()["code"] == "invalid_state"


def test_double_booking_is_rejected(client):
    room = create_classroom(client)
    slot = create_slot(client)
    assert create_booking(client, room["id"], slot["id"]).status_code == 201

    clash = create_booking(client, room["id"], slot["id"], subject_code="MA201")
    assert clash.status_code == 409
    payload = clash.json()
    assert payload["code"] == "booking_conflict"
    assert payload["message"].startswith("Classroom conflict")
    assert payload["details"]["resource_id"] == str(room["id"])

    next_semester = create_booking(client, room["id"], slot["id"], semester=2)
    assert next_semester.status_code == 201


def test_faculty_double_booking_is_rejected(client):
    first_room = create_classroom(client, "101")
    second_room = create_classroom(client, "102")
    slot = create_slot(client)
    assert create_booking(client, first_room["id"], slot["id"], faculty_id="fac-9").status_code == 201

    clash = create_booking(client, second_room["id"], slot["id"], faculty_id="fac-9")
    assert clash.status_code == 409
    assert clash.json()["message"].startswith("Faculty conflict")


def test_update_into_held_slot_is_rejected(client):
    room = create_classroom(client)
    morning = create_slot(client)
    later = create_slot(client, start="10:00:00", end="11:00:00", name="Period 2")
    create_booking(client, room["id"], morning["id"])
    movable = create_booking(client, room["id"], later["id"]).json()["booking"]

    moved = client.put(f"/api/bookings/{movable['id']}", json={"slot_id": morning["id"]})
    assert moved.status_code == 409
    assert client.get(f"/api/bookings/{movable['id']}").json()["slot_id"] == later["id"]


def test_booking_validation_errors(client):
    room = create_classroom(client)
    slot = create_slot(client)

    bad_format = create_booking(client, room["id"], slot["id"], academic_year="2024/2025")
    assert bad_format.status_code == 422

    far_future = create_booking(client, room["id"], slot["id"], academic_year=f"{YEAR + 20}-{YEAR + 21}")
    assert far_future.status_code == 422
    assert far_future.json()["code"] == "validation_failed"

    missing_room = create_booking(client, 999, slot["id"])
    assert missing_room.status_code == 404

    missing_booking = client.get("/api/bookings/999")
    assert missing_booking.status_code == 404
    assert missing_booking.json()["code"] == "not_found"


def test_unavailable_classroom_and_inactive_slot(client):
    closed = create_classroom(client, "201", status="maintenance")
    open_room = create_classroom(client, "202")
    slot = create_slot(client)
    off_slot = create_slot(client, start="10:00:00", end="11:00:00", name="Off")
    client.post(f"/api/time-slots/{off_slot['id']}/deactivate")

    in_maintenance = create_booking(client, closed["id"], slot["id"])
    assert in_maintenance.status_code == 409
    assert in_maintenance.json()["code"] == "resource_unavailable"

    inactive = create_booking(client, open_room["id"], off_slot["id"])
    assert inactive.status_code == 409
    assert inactive.json()["code"] == "resource_unavailable"


def test_capacity_warning_is_returned(client):
    room = create_classroom(client, capacity=20)
    slot = create_slot(client)

    response = create_booking(client, room["id"], slot["id"], expected_students=25)
    assert response.status_code == 201
    warnings = response.json()["warnings"]
    assert len(warnings) == 1
    assert warnings[0].startswith("CAPACITY EXCEEDED")


def test_list_bookings_filters(client):
    room = create_classroom(client)
    first = create_slot(client)
    second = create_slot(client, start="10:00:00", end="11:00:00", name="Period 2")
    kept = create_booking(client, room["id"], first["id"], faculty_id="fac-1").json()["booking"]
    dropped = create_booking(client, room["id"], second["id"]).json()["booking"]
    client.post(f"/api/bookings/{dropped['id']}/retire")

    live = client.get("/api/bookings/").json()
    assert [item["id"] for item in live] == [kept["id"]]

    everything = client.get("/api/bookings/", params={"include_retired": "true"}).json()
    assert [item["id"] for item in everything] == [kept["id"], dropped["id"]]

    by_faculty = client.get("/api/bookings/", params={"faculty_id": "fac-1"}).json()
    assert [item["id"] for item in by_faculty] == [kept["id"]]

    other_year = client.get("/api/bookings/", params={"academic_year": "1999-2000"}).json()
    assert other_year == []


def test_slot_with_bookings_cannot_be_deleted(client):
    room = create_classroom(client)
    slot = create_slot(client)
    booking = create_booking(client, room["id"], slot["id"]).json()["booking"]

    blocked = client.delete(f"/api/time-slots/{slot['id']}")
    assert blocked.status_code == 409
    assert blocked.json()["code"] == "resource_in_use"

    client.post(f"/api/bookings/{booking['id']}/retire")
    still_blocked = client.delete(f"/api/time-slots/{slot['id']}")
    assert still_blocked.status_code == 409

    deactivated = client.post(f"/api/time-slots/{slot['id']}/deactivate")
    assert deactivated.status_code == 200


def test_update_cannot_clear_required_fields(client):
    room = create_classroom(client)
    slot = create_slot(client)
    booking = create_booking(client, room["id"], slot["id"]).json()["booking"]

    for field in ("academic_year", "semester", "slot_id", "classroom_id"):
        response = client.put(f"/api/bookings/{booking['id']}", json={field: None}, headers=ADMIN)
        assert response.status_code == 422, field

    fetched = client.get(f"/api/bookings/{booking['id']}").json()
    assert fetched["academic_year"] == ACADEMIC_YEAR
    assert fetched["semester"] == 1
    assert fetched["slot_id"] == slot["id"]


def test_out_of_range_ids_are_rejected_before_the_store(client):
    room = create_classroom(client)
    slot = create_slot(client)
    payload = {"resource_id": room["id"], "slot_id": 10**20, "academic_year": ACADEMIC_YEAR, "semester": 1}

    assert client.post("/api/availability/check", json=payload).status_code == 422
    payload.update(slot_id=slot["id"], resource_id=10**20)
    assert client.post("/api/availability/check", json=payload).status_code == 422
    payload.update(resource_id=room["id"], exclude_booking_id=10**20)
    assert client.post("/api/availability/check", json=payload).status_code == 422
    payload.update(resource_kind="faculty", resource_id="f" * 37, exclude_booking_id=None)
    assert client.post("/api/availability/check", json=payload).status_code == 422

    assert client.get(f"/api/bookings/{10**20}").status_code == 422
    assert check(client, room["id"], slot["id"]) is True
