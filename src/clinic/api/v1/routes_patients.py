from __future__ import annotations

from typing import Any, List, Optional

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from src.clinic.domain.models.patient import Patient
from src.clinic.services.audit.service import audit_service
from src.clinic.services.patients.service import patient_service


router = APIRouter(prefix="/patients", tags=["patients"])


class PatientCreateRequest(BaseModel):
    id: int
    name: str
    surname: str
    email: str
    phone_number: str
    fiscal_code: str
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    anamnesis: Optional[str] = None
    treatments: Optional[List[Any]] = None


class PatientUpdateRequest(BaseModel):
    name: Optional[str] = None
    surname: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    fiscal_code: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    anamnesis: Optional[str] = None
    treatments: Optional[List[Any]] = None


@router.get("/", response_model=List[Patient])
async def list_patients() -> List[Patient]:
    return patient_service.list_patients()


@router.get("/{patient_id}", response_model=Patient)
async def get_patient(patient_id: int) -> Patient:
    return patient_service.get_patient(patient_id)


@router.post("/", response_model=Patient, status_code=status.HTTP_201_CREATED)
async def create_patient(payload: PatientCreateRequest) -> Patient:
    patient = patient_service.create_patient(payload.model_dump())
    audit_service.log_event(action="create_patient", resource_type="patient", resource_id=str(patient.id))
    return patient


@router.put("/{patient_id}", response_model=Patient)
async def update_patient(patient_id: int, payload: PatientUpdateRequest) -> Patient:
    changes = payload.model_dump(exclude_unset=True)
    patient = patient_service.update_patient(patient_id, changes)
    audit_service.log_event(
        action="update_patient",
        resource_type="patient",
        resource_id=str(patient_id),
        extra={"fields": sorted(changes)},
    )
    return patient


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_patient(patient_id: int) -> Response:
    patient_service.delete_patient(patient_id)
    audit_service.log_event(action="delete_patient", resource_type="patient", resource_id=str(patient_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
