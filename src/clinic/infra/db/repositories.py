from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.clinic.domain.models.appointment import Appointment
from src.clinic.domain.models.patient import Patient
from src.clinic.domain.models.treatment import Treatment


class PatientRepository(ABC):
    @abstractmethod
    def get(self, patient_id: int) -> Optional[Patient]:
        raise NotImplementedError

    @abstractmethod
    def find(self) -> List[Patient]:
        raise NotImplementedError

    @abstractmethod
    def save(self, patient: Patient) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, patient_id: int) -> bool:
        raise NotImplementedError


class TreatmentRepository(ABC):
    @abstractmethod
    def get(self, treatment_id: int) -> Optional[Treatment]:
        raise NotImplementedError

    @abstractmethod
    def find(self, *, patient_id: Optional[int] = None) -> List[Treatment]:
        raise NotImplementedError

    @abstractmethod
    def save(self, treatment: Treatment) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, treatment_id: int) -> bool:
        raise NotImplementedError


class AppointmentRepository(ABC):
    @abstractmethod
    def get(self, appointment_id: UUID) -> Optional[Appointment]:
        raise NotImplementedError

    @abstractmethod
    def find(
        self,
        *,
        patient_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Appointment]:
        """Return appointments matching the filters, ``start``/``end`` inclusive."""
        raise NotImplementedError

    @abstractmethod
    def save(self, appointment: Appointment) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, appointment_id: UUID) -> bool:
        raise NotImplementedError
