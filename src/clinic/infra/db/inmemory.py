from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from src.clinic.domain.models.appointment import Appointment
from src.clinic.domain.models.patient import Patient
from src.clinic.domain.models.treatment import Treatment
from src.clinic.infra.db.repositories import (
    AppointmentRepository,
    PatientRepository,
    TreatmentRepository,
)


class InMemoryPatientRepository(PatientRepository):
    """Dictionary-backed patient store used in development and tests."""

    def __init__(self) -> None:
        self._patients: Dict[int, Patient] = {}

    def get(self, patient_id: int) -> Optional[Patient]:
        return self._patients.get(patient_id)

    def find(self) -> List[Patient]:
        return list(self._patients.values())

    def save(self, patient: Patient) -> None:
        self._patients[patient.id] = patient

    def delete(self, patient_id: int) -> bool:
        return self._patients.pop(patient_id, None) is not None


class InMemoryTreatmentRepository(TreatmentRepository):
    def __init__(self) -> None:
        self._treatments: Dict[int, Treatment] = {}

    def get(self, treatment_id: int) -> Optional[Treatment]:
        return self._treatments.get(treatment_id)

    def find(self, *, patient_id: Optional[int] = None) -> List[Treatment]:
        return [
            treatment
            for treatment in self._treatments.values()
            if patient_id is None or treatment.patient_id == patient_id
        ]

    def save(self, treatment: Treatment) -> None:
        self._treatments[treatment.id] = treatment

    def delete(self, treatment_id: int) -> bool:
        return self._treatments.pop(treatment_id, None) is not None


class InMemoryAppointmentRepository(AppointmentRepository):
    def __init__(self) -> None:
        self._appointments: Dict[UUID, Appointment] = {}

    def get(self, appointment_id: UUID) -> Optional[Appointment]:
        return self._appointments.get(appointment_id)

    def find(
        self,
        *,
        patient_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Appointment]:
        results = []
        for appointment in self._appointments.values():
            if patient_id is not None and appointment.patient_id != patient_id:
                continue
            if start is not None and appointment.date < start:
                continue
            if end is not None and appointment.date > end:
                continue
            results.append(appointment)
        return results

    def save(self, appointment: Appointment) -> None:
        self._appointments[appointment.id] = appointment

    def delete(self, appointment_id: UUID) -> bool:
        return self._appointments.pop(appointment_id, None) is not None


# Module-level singletons. init_sql_repositories() may rebind these, so
# consumers should look them up through this module at call time.
patient_repository: PatientRepository = InMemoryPatientRepository()
treatment_repository: TreatmentRepository = InMemoryTreatmentRepository()
appointment_repository: AppointmentRepository = InMemoryAppointmentRepository()
