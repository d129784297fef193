from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import UUID, uuid4

from src.clinic.core.dates import end_of_day, normalize_date, start_of_day
from src.clinic.domain.models.appointment import Appointment
from src.clinic.errors import NotFound, ValidationFailed, require_fields
from src.clinic.infra.db import inmemory as repos

REQUIRED_FIELDS = ["patient_id", "date"]


def _parse_date(value: Union[datetime, str], field: str) -> datetime:
    parsed = normalize_date(value)
    if parsed is None:
        raise ValidationFailed(f"Invalid date for {field}: {value}")
    return parsed


def day_range(start_date: str, end_date: Optional[str] = None) -> Tuple[datetime, datetime]:
    """Inclusive bounds from the start of ``start_date`` to the end of ``end_date``.

    With no ``end_date`` the range covers the single day ``start_date``.
    """

    start = _parse_date(start_date, "start_date")
    end = _parse_date(end_date, "end_date") if end_date else start
    return start_of_day(start), end_of_day(end)


class AppointmentService:
    def list_appointments(
        self,
        *,
        patient_id: Optional[int] = None,
        date: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Appointment]:
        start: Optional[datetime] = None
        end: Optional[datetime] = None
        if date:
            start, end = day_range(date)
        elif start_date and end_date:
            start, end = day_range(start_date, end_date)

        appointments = repos.appointment_repository.find(patient_id=patient_id, start=start, end=end)
        appointments.sort(key=lambda a: a.date)
        return appointments

    def get_appointment(self, appointment_id: UUID) -> Appointment:
        appointment = repos.appointment_repository.get(appointment_id)
        if appointment is None:
            raise NotFound("Appointment not found")
        return appointment

    def create_appointment(self, data: Dict[str, Any]) -> Appointment:
        require_fields(data, REQUIRED_FIELDS)

        now = datetime.now()
        appointment = Appointment(
            id=uuid4(),
            patient_id=int(data["patient_id"]),
            date=_parse_date(data["date"], "date"),
            created_at=now,
            updated_at=now,
        )
        repos.appointment_repository.save(appointment)
        return appointment

    def update_appointment(self, appointment_id: UUID, changes: Dict[str, Any]) -> Appointment:
        appointment = self.get_appointment(appointment_id)
        update: Dict[str, Any] = {"updated_at": datetime.now()}
        if changes.get("patient_id") is not None:
            update["patient_id"] = int(changes["patient_id"])
        if changes.get("date") is not None:
            update["date"] = _parse_date(changes["date"], "date")
        updated = appointment.model_copy(update=update)
        repos.appointment_repository.save(updated)
        return updated

    def delete_appointment(self, appointment_id: UUID) -> None:
        if not repos.appointment_repository.delete(appointment_id):
            raise NotFound("Appointment not found")


appointment_service = AppointmentService()
