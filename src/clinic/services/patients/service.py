from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from src.clinic.domain.models.patient import Patient
from src.clinic.errors import Conflict, NotFound, require_fields
from src.clinic.infra.db import inmemory as repos

REQUIRED_FIELDS = ["id", "name", "surname", "email", "phone_number", "fiscal_code"]

_UPDATABLE_FIELDS = {
    "name",
    "surname",
    "email",
    "phone_number",
    "date_of_birth",
    "address",
    "fiscal_code",
    "anamnesis",
    "treatments",
}


class PatientService:
    def list_patients(self) -> List[Patient]:
        return repos.patient_repository.find()

    def get_patient(self, patient_id: int) -> Patient:
        patient = repos.patient_repository.get(patient_id)
        if patient is None:
            raise NotFound("Patient not found")
        return patient

    def create_patient(self, data: Dict[str, Any]) -> Patient:
        require_fields(data, REQUIRED_FIELDS)

        patient_id = int(data["id"])
        if repos.patient_repository.get(patient_id) is not None:
            raise Conflict("Patient ID already exists")

        now = datetime.now()
        patient = Patient(
            id=patient_id,
            name=data["name"],
            surname=data["surname"],
            email=data["email"],
            phone_number=data["phone_number"],
            fiscal_code=data["fiscal_code"],
            date_of_birth=data.get("date_of_birth") or now.isoformat(),
            address=data.get("address") or "",
            anamnesis=data.get("anamnesis") or "",
            treatments=data.get("treatments") or [],
            created_at=now,
            updated_at=now,
        )
        repos.patient_repository.save(patient)
        return patient

    def update_patient(self, patient_id: int, changes: Dict[str, Any]) -> Patient:
        patient = self.get_patient(patient_id)
        update = {
            key: value for key, value in changes.items() if key in _UPDATABLE_FIELDS and value is not None
        }
        update["updated_at"] = datetime.now()
        updated = patient.model_copy(update=update)
        repos.patient_repository.save(updated)
        return updated

    def delete_patient(self, patient_id: int) -> None:
        if not repos.patient_repository.delete(patient_id):
            raise NotFound("Patient not found")


patient_service = PatientService()
