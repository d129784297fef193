from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union
from uuid import UUID

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from src.clinic.domain.models.appointment import Appointment
from src.clinic.services.appointments.service import appointment_service
from src.clinic.services.audit.service import audit_service


router = APIRouter(prefix="/appointments", tags=["appointments"])


class AppointmentCreateRequest(BaseModel):
    patient_id: int
    date: Union[datetime, str]


class AppointmentUpdateRequest(BaseModel):
    patient_id: Optional[int] = None
    date: Union[datetime, str, None] = None


@router.get("/", response_model=List[Appointment])
async def list_appointments(
    patient_id: Optional[int] = None,
    date: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> List[Appointment]:
    """List appointments in ascending date order.

    ``date`` restricts results to one calendar day; ``start_date`` together
    with ``end_date`` restricts them to an inclusive range of days.
    """

    return appointment_service.list_appointments(
        patient_id=patient_id,
        date=date,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/{appointment_id}", response_model=Appointment)
async def get_appointment(appointment_id: UUID) -> Appointment:
    return appointment_service.get_appointment(appointment_id)


@router.post("/", response_model=Appointment, status_code=status.HTTP_201_CREATED)
async def create_appointment(payload: AppointmentCreateRequest) -> Appointment:
    appointment = appointment_service.create_appointment(payload.model_dump())
    audit_service.log_event(
        action="create_appointment",
        resource_type="appointment",
        resource_id=str(appointment.id),
        extra={"patient_id": appointment.patient_id},
    )
    return appointment


@router.put("/{appointment_id}", response_model=Appointment)
async def update_appointment(appointment_id: UUID, payload: AppointmentUpdateRequest) -> Appointment:
    appointment = appointment_service.update_appointment(appointment_id, payload.model_dump(exclude_unset=True))
    audit_service.log_event(action="update_appointment", resource_type="appointment", resource_id=str(appointment_id))
    return appointment


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appointment(appointment_id: UUID) -> Response:
    appointment_service.delete_appointment(appointment_id)
    audit_service.log_event(action="delete_appointment", resource_type="appointment", resource_id=str(appointment_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
