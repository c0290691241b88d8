from datetime import date, timedelta

import pytest
import pytest_asyncio

async def book(client, clinic, day, treatment_id=None, status="scheduled"):
    response = await client.post("/api/v1/appointments", json={
        "patientId": clinic["patient"]["id"],
        "doctorId": clinic["doctor"]["id"],
        "roomId": clinic["room"]["id"],
        "treatmentId": treatment_id or clinic["treatment"]["id"],
        "startTime": f"{day}T10:00:00",
        "endTime": f"{day}T10:30:00",
        "status": status,
    })
    assert response.status_code == 201
    return response.json()

@pytest.fixture
def upcoming_day():
    return (date.today() + timedelta(days=30)).isoformat()

@pytest_asyncio.fixture
async def history(client, clinic, upcoming_day):
    acupuncture = (await client.post("/api/v1/treatments", json={"name": "Acupuncture", "price": 55})).json()

    await book(client, clinic, "2024-01-15", status="completed")
    cancelled = await book(client, clinic, "2024-01-16")
    await client.patch(f"/api/v1/appointments/{cancelled['id']}/cancel")
    await book(client, clinic, "2024-01-17", treatment_id=acupuncture["id"], status="no_show")
    await book(client, clinic, upcoming_day)
    return {"acupuncture": acupuncture}

@pytest.mark.asyncio
async def test_history_summary_groups_by_treatment(client, clinic, history, upcoming_day):
    patient_id = clinic["patient"]["id"]
    summary = (await client.get(f"/api/v1/patients/{patient_id}/history/summary")).json()

    assert summary["total_sessions"] == 4
    assert summary["total_treatment_types"] == 2

    massage, acupuncture = summary["treatments"]
    assert massage["treatment_name"] == "Massage"
    assert massage["total_sessions"] == 3
    assert massage["completed_sessions"] == 1
    assert massage["cancelled_sessions"] == 1
    assert massage["first_session"] == "2024-01-15"
    assert massage["last_session"] == upcoming_day
    assert acupuncture["treatment_name"] == "Acupuncture"
    assert acupuncture["appointments"][0]["doctor_name"] == "Dr. Ruiz"
    assert acupuncture["appointments"][0]["room_name"] == "Room 1"

@pytest.mark.asyncio
async def test_history_for_one_treatment(client, clinic, history):
    patient_id = clinic["patient"]["id"]
    treatment_id = history["acupuncture"]["id"]

    sessions = (await client.get(f"/api/v1/patients/{patient_id}/history/treatments/{treatment_id}")).json()
    assert sessions["treatment_name"] == "Acupuncture"
    assert sessions["total_sessions"] == 1
    assert sessions["appointments"][0]["status"] == "no_show"

@pytest.mark.asyncio
async def test_history_timeline_is_newest_first(client, clinic, history, upcoming_day):
    patient_id = clinic["patient"]["id"]

    timeline = (await client.get(f"/api/v1/patients/{patient_id}/history/timeline", params={"limit": 2})).json()
    assert [entry["date"] for entry in timeline] == [upcoming_day, "2024-01-17"]

@pytest.mark.asyncio
async def test_history_statistics(client, clinic, history, upcoming_day):
    patient_id = clinic["patient"]["id"]
    stats = (await client.get(f"/api/v1/patients/{patient_id}/history/stats")).json()

    assert stats == {
        "total_appointments": 4,
        "completed_appointments": 1,
        "cancelled_appointments": 1,
        "no_show_appointments": 1,
        "upcoming_appointments": 1,
        "first_appointment": "2024-01-15",
        "last_appointment": upcoming_day,
        "most_frequent_treatment": "Massage",
        "treatment_types": 2,
    }

@pytest.mark.asyncio
async def test_history_of_unknown_patient(client):
    response = await client.get("/api/v1/patients/00000000-0000-0000-0000-000000000000/history/stats")
    assert response.status_code == 404

@pytest.mark.asyncio
async def test_empty_history(client, clinic):
    stats = (await client.get(f"/api/v1/patients/{clinic['patient']['id']}/history/stats")).json()
    assert stats["total_appointments"] == 0
    assert stats["first_appointment"] is None
    assert stats["most_frequent_treatment"] is None

@pytest.mark.asyncio
async def test_patient_with_upcoming_appointments_cannot_be_removed(client, clinic, upcoming_day):
    patient_id = clinic["patient"]["id"]
    appointment = await book(client, clinic, upcoming_day)

    response = await client.delete(f"/api/v1/patients/{patient_id}")
    assert response.status_code == 400

    await client.patch(f"/api/v1/appointments/{appointment['id']}/cancel")
    response = await client.delete(f"/api/v1/patients/{patient_id}")
    assert response.status_code == 200
    assert response.json()["patient"]["is_active"] is False

    listed = (await client.get("/api/v1/patients")).json()
    assert patient_id not in [p["id"] for p in listed]

@pytest.mark.asyncio
async def test_past_appointments_do_not_block_removal(client, clinic):
    await book(client, clinic, "2024-01-15", status="completed")
    response = await client.delete(f"/api/v1/patients/{clinic['patient']['id']}")
    assert response.status_code == 200

@pytest.mark.asyncio
async def test_search_by_phone_ignores_formatting(client, clinic):
    await client.post("/api/v1/patients", json={
        "first_name": "Luis", "last_name": "Garcia", "document_number": "X2", "phone": "611222333"
    })

    found = (await client.get("/api/v1/patients/search-by-phone", params={"phone": "600 000-000"})).json()
    assert [p["first_name"] for p in found] == ["Ana"]

    response = await client.get("/api/v1/patients/search-by-phone", params={"phone": "n/a"})
    assert response.status_code == 400
