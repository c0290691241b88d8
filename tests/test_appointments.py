from datetime import date

import pytest

BASE = "/api/v1/appointments"

def booking(clinic, start="2024-01-15T10:00:00", end="2024-01-15T10:30:00", **extra):
    body = {
        "patientId": clinic["patient"]["id"],
        "doctorId": clinic["doctor"]["id"],
        "roomId": clinic["room"]["id"],
        "treatmentId": clinic["treatment"]["id"],
        "startTime": start,
        "endTime": end,
    }
    body.update(extra)
    return body

@pytest.mark.asyncio
async def test_create_appointment(client, clinic):
    response = await client.post(BASE, json=booking(clinic))
    assert response.status_code == 201
    data = response.json()
    assert data["date"] == "2024-01-15"
    assert data["status"] == "scheduled"
    assert data["color"] == "#2196F3"
    assert data["resource_id"] == clinic["room"]["id"]
    assert data["title"] == "Ana Lopez - Massage"

@pytest.mark.asyncio
async def test_create_accepts_snake_case_and_timezone_offsets(client, clinic):
    body = {
        "patient_id": clinic["patient"]["id"],
        "doctor_id": clinic["doctor"]["id"],
        "room_id": clinic["room"]["id"],
        "start_time": "2024-01-15T10:00:00+01:00",
        "end_time": "2024-01-15T10:30:00+01:00",
    }
    response = await client.post(BASE, json=body)
    assert response.status_code == 201
    assert response.json()["start_time"] == "2024-01-15T09:00:00"
    assert response.json()["title"] == "Ana Lopez"

@pytest.mark.asyncio
async def test_overlapping_booking_is_rejected(client, clinic):
    assert (await client.post(BASE, json=booking(clinic))).status_code == 201

    response = await client.post(BASE, json=booking(clinic, "2024-01-15T10:15:00", "2024-01-15T10:45:00"))
    assert response.status_code == 400
    assert response.json()["detail"] == "The selected time is not available"

@pytest.mark.asyncio
async def test_back_to_back_bookings_are_allowed(client, clinic):
    assert (await client.post(BASE, json=booking(clinic))).status_code == 201
    response = await client.post(BASE, json=booking(clinic, "2024-01-15T10:30:00", "2024-01-15T11:00:00"))
    assert response.status_code == 201

@pytest.mark.asyncio
async def test_same_room_with_another_doctor_is_rejected(client, clinic):
    assert (await client.post(BASE, json=booking(clinic))).status_code == 201
    other = await client.post("/api/v1/doctors", json={"name": "Dr. Vega"})

    body = booking(clinic, "2024-01-15T10:15:00", "2024-01-15T10:45:00", doctorId=other.json()["id"])
    response = await client.post(BASE, json=body)
    assert response.status_code == 400

@pytest.mark.asyncio
async def test_same_doctor_in_another_room_is_rejected(client, clinic):
    assert (await client.post(BASE, json=booking(clinic))).status_code == 201
    other = await client.post("/api/v1/rooms", json={"name": "Room 2"})

    body = booking(clinic, "2024-01-15T10:15:00", "2024-01-15T10:45:00", roomId=other.json()["id"])
    response = await client.post(BASE, json=body)
    assert response.status_code == 400

@pytest.mark.asyncio
async def test_invalid_interval_is_a_validation_error(client, clinic):
    response = await client.post(BASE, json=booking(clinic, "2024-01-15T10:30:00", "2024-01-15T10:30:00"))
    assert response.status_code == 422

    response = await client.post(BASE, json=booking(clinic, date="2024-01-16"))
    assert response.status_code == 422

@pytest.mark.asyncio
async def test_unknown_references_are_not_found(client, clinic):
    body = booking(clinic, roomId="00000000-0000-0000-0000-000000000000")
    response = await client.post(BASE, json=body)
    assert response.status_code == 404
    assert response.json()["detail"] == "Room not found"

@pytest.mark.asyncio
async def test_reschedule_ignores_its_own_slot(client, clinic):
    created = (await client.post(BASE, json=booking(clinic))).json()

    response = await client.patch(f"{BASE}/{created['id']}", json={
        "startTime": "2024-01-15T10:15:00",
        "endTime": "2024-01-15T10:45:00",
    })
    assert response.status_code == 200
    assert response.json()["start_time"] == "2024-01-15T10:15:00"

@pytest.mark.asyncio
async def test_reschedule_onto_another_booking_is_rejected(client, clinic):
    await client.post(BASE, json=booking(clinic))
    second = (await client.post(BASE, json=booking(clinic, "2024-01-15T11:00:00", "2024-01-15T11:30:00"))).json()

    response = await client.patch(f"{BASE}/{second['id']}", json={
        "startTime": "2024-01-15T10:00:00",
        "endTime": "2024-01-15T10:30:00",
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "The new time is not available"

@pytest.mark.asyncio
async def test_moving_to_another_day_keeps_the_time_of_day(client, clinic):
    created = (await client.post(BASE, json=booking(clinic))).json()

    response = await client.patch(f"{BASE}/{created['id']}", json={"date": "2024-01-16"})
    assert response.status_code == 200
    data = response.json()
    assert data["date"] == "2024-01-16"
    assert data["start_time"] == "2024-01-16T10:00:00"
    assert data["end_time"] == "2024-01-16T10:30:00"

@pytest.mark.asyncio
async def test_reschedule_with_inverted_interval_is_rejected(client, clinic):
    created = (await client.post(BASE, json=booking(clinic))).json()
    response = await client.patch(f"{BASE}/{created['id']}", json={"endTime": "2024-01-15T09:00:00"})
    assert response.status_code == 400

@pytest.mark.asyncio
async def test_cancel_frees_the_slot(client, clinic):
    created = (await client.post(BASE, json=booking(clinic))).json()

    response = await client.patch(f"{BASE}/{created['id']}/cancel", json={"reason": "Patient called"})
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert response.json()["observations"] == "Patient called"
    assert response.json()["color"] == "#F44336"

    assert (await client.post(BASE, json=booking(clinic))).status_code == 201

@pytest.mark.asyncio
async def test_reactivating_into_a_taken_slot_is_rejected(client, clinic):
    created = (await client.post(BASE, json=booking(clinic))).json()
    await client.patch(f"{BASE}/{created['id']}/cancel")
    await client.post(BASE, json=booking(clinic))

    response = await client.patch(f"{BASE}/{created['id']}", json={"status": "scheduled"})
    assert response.status_code == 400

@pytest.mark.asyncio
async def test_confirm_and_no_show(client, clinic):
    created = (await client.post(BASE, json=booking(clinic))).json()

    confirmed = await client.patch(f"{BASE}/{created['id']}/confirm")
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "confirmed"
    assert confirmed.json()["confirmed"] is True
    assert confirmed.json()["confirmation_date"] is not None

    no_show = await client.patch(f"{BASE}/{created['id']}/no-show")
    assert no_show.json()["status"] == "no_show"
    assert no_show.json()["color"] == "#795548"

@pytest.mark.asyncio
async def test_delete_appointment(client, clinic):
    created = (await client.post(BASE, json=booking(clinic))).json()

    response = await client.delete(f"{BASE}/{created['id']}")
    assert response.status_code == 200
    assert response.json()["appointment"]["id"] == created["id"]
    assert (await client.get(f"{BASE}/{created['id']}")).status_code == 404

@pytest.mark.asyncio
async def test_completed_appointment_cannot_be_deleted(client, clinic):
    created = (await client.post(BASE, json=booking(clinic))).json()
    await client.patch(f"{BASE}/{created['id']}", json={"status": "completed"})

    response = await client.delete(f"{BASE}/{created['id']}")
    assert response.status_code == 400

@pytest.mark.asyncio
async def test_check_availability(client, clinic):
    created = (await client.post(BASE, json=booking(clinic))).json()
    body = {
        "startTime": "2024-01-15T10:00:00",
        "endTime": "2024-01-15T10:30:00",
        "roomId": clinic["room"]["id"],
        "doctorId": clinic["doctor"]["id"],
    }

    response = await client.post(f"{BASE}/check-availability", json=body)
    assert response.json() == {"available": False}

    body["excludeAppointmentId"] = created["id"]
    response = await client.post(f"{BASE}/check-availability", json=body)
    assert response.json() == {"available": True}

@pytest.mark.asyncio
async def test_available_slots(client, clinic):
    await client.post(BASE, json=booking(clinic))

    response = await client.get(f"{BASE}/available-slots", params={
        "date": "2024-01-15",
        "doctorId": clinic["doctor"]["id"],
        "treatmentId": clinic["treatment"]["id"],
    })
    assert response.status_code == 200
    slots = response.json()
    starts = [slot["start"] for slot in slots]
    assert "2024-01-15T10:00:00" not in starts
    assert starts[0] == "2024-01-15T09:00:00"
    assert slots[0]["display"] == "09:00 - 09:30"
    assert len(slots) == 21

@pytest.mark.asyncio
async def test_available_slots_unknown_treatment(client, clinic):
    response = await client.get(f"{BASE}/available-slots", params={
        "date": "2024-01-15",
        "doctorId": clinic["doctor"]["id"],
        "treatmentId": "00000000-0000-0000-0000-000000000000",
    })
    assert response.status_code == 404

@pytest.mark.asyncio
async def test_list_filters(client, clinic):
    await client.post(BASE, json=booking(clinic, "2024-01-16T09:00:00", "2024-01-16T09:30:00"))
    await client.post(BASE, json=booking(clinic))

    response = await client.get(BASE)
    starts = [a["start_time"] for a in response.json()]
    assert starts == ["2024-01-15T10:00:00", "2024-01-16T09:00:00"]

    response = await client.get(BASE, params={"start_date": "2024-01-16"})
    assert len(response.json()) == 1

    response = await client.get(f"{BASE}/patient/{clinic['patient']['id']}")
    assert len(response.json()) == 2

@pytest.mark.asyncio
async def test_today_and_day_view(client, clinic):
    today = date.today().isoformat()
    await client.post(BASE, json=booking(clinic, f"{today}T10:00:00", f"{today}T10:30:00"))
    await client.post(BASE, json=booking(clinic))

    assert len((await client.get(f"{BASE}/today")).json()) == 1
    assert len((await client.get(BASE, params={"view": "day"})).json()) == 1
    assert (await client.get(BASE, params={"view": "year"})).status_code == 422
