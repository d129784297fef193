from datetime import datetime

from fastapi import status

from src.clinic.services.patients.service import patient_service

PATIENT = {
    "id": 7,
    "name": "Maria",
    "surname": "Verdi",
    "email": "maria@example.com",
    "phone_number": "+39 333 0000000",
    "fiscal_code": "VRDMRA80A41H501X",
    "date_of_birth": "1980-01-01",
    "anamnesis": "Hypertension",
}


async def test_create_and_get_patient(client):
    response = await client.post("/api/v1/patients/", json=PATIENT)
    assert response.status_code == status.HTTP_201_CREATED
    created = response.json()
    assert created["id"] == 7
    assert created["address"] == ""
    assert created["treatments"] == []
    assert created["created_at"] is not None

    response = await client.get("/api/v1/patients/7")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["fiscal_code"] == PATIENT["fiscal_code"]

    response = await client.get("/api/v1/patients/")
    assert [p["id"] for p in response.json()] == [7]


async def test_duplicate_id_conflicts(client):
    await client.post("/api/v1/patients/", json=PATIENT)

    response = await client.post("/api/v1/patients/", json=PATIENT)

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json() == {"error": {"code": "Conflict", "message": "Patient ID already exists"}}


async def test_blank_required_field_is_rejected(client):
    response = await client.post("/api/v1/patients/", json={**PATIENT, "name": "  ", "email": ""})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"]["message"] == "Missing required fields: name, email"


async def test_missing_patient_is_not_found(client):
    response = await client.get("/api/v1/patients/404")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"]["code"] == "Not Found"


async def test_update_ignores_nulls_and_bumps_updated_at(client):
    created = (await client.post("/api/v1/patients/", json=PATIENT)).json()

    response = await client.put(
        "/api/v1/patients/7",
        json={"address": "Via Roma 1", "anamnesis": None},
    )

    assert response.status_code == status.HTTP_200_OK
    updated = response.json()
    assert updated["address"] == "Via Roma 1"
    assert updated["anamnesis"] == "Hypertension"
    assert updated["created_at"] == created["created_at"]
    assert datetime.fromisoformat(updated["updated_at"]) >= datetime.fromisoformat(created["updated_at"])


async def test_delete_patient(client):
    await client.post("/api/v1/patients/", json=PATIENT)

    response = await client.delete("/api/v1/patients/7")
    assert response.status_code == status.HTTP_204_NO_CONTENT

    response = await client.delete("/api/v1/patients/7")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_date_of_birth_defaults_to_creation_time():
    data = {key: value for key, value in PATIENT.items() if key != "date_of_birth"}

    patient = patient_service.create_patient(data)

    assert patient.date_of_birth.startswith(patient.created_at.date().isoformat())
