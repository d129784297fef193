from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.clinic.domain.models.appointment import Appointment
from src.clinic.domain.models.patient import Patient
from src.clinic.domain.models.treatment import Treatment
from src.clinic.errors import DataSourceUnavailable
from src.clinic.infra.db.models import AppointmentORM, PatientORM, TreatmentORM
from src.clinic.infra.db.repositories import (
    AppointmentRepository,
    PatientRepository,
    TreatmentRepository,
)
from src.clinic.infra.db.session import SessionFactory

logger = logging.getLogger("db")


class _SqlRepository:
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        """Yield a session, committing on success.

        Driver and connection failures surface as DataSourceUnavailable so the
        API reports a server-side error instead of a raw traceback.
        """

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Database operation failed")
            raise DataSourceUnavailable("Database unavailable") from exc
        finally:
            session.close()


class SqlPatientRepository(_SqlRepository, PatientRepository):
    def get(self, patient_id: int) -> Optional[Patient]:
        with self._session() as session:
            orm = session.get(PatientORM, patient_id)
            return orm.to_domain() if orm is not None else None

    def find(self) -> List[Patient]:
        with self._session() as session:
            return [orm.to_domain() for orm in session.scalars(select(PatientORM))]

    def save(self, patient: Patient) -> None:
        with self._session() as session:
            existing = session.get(PatientORM, patient.id)
            if existing is None:
                session.add(PatientORM.from_domain(patient))
            else:
                existing.update_from(patient)

    def delete(self, patient_id: int) -> bool:
        with self._session() as session:
            orm = session.get(PatientORM, patient_id)
            if orm is None:
                return False
            session.delete(orm)
            return True


class SqlTreatmentRepository(_SqlRepository, TreatmentRepository):
    def get(self, treatment_id: int) -> Optional[Treatment]:
        with self._session() as session:
            orm = session.get(TreatmentORM, treatment_id)
            return orm.to_domain() if orm is not None else None

    def find(self, *, patient_id: Optional[int] = None) -> List[Treatment]:
        with self._session() as session:
            query = select(TreatmentORM)
            if patient_id is not None:
                query = query.where(TreatmentORM.patient_id == patient_id)
            return [orm.to_domain() for orm in session.scalars(query)]

    def save(self, treatment: Treatment) -> None:
        with self._session() as session:
            existing = session.get(TreatmentORM, treatment.id)
            if existing is None:
                session.add(TreatmentORM.from_domain(treatment))
            else:
                existing.update_from(treatment)

    def delete(self, treatment_id: int) -> bool:
        with self._session() as session:
            orm = session.get(TreatmentORM, treatment_id)
            if orm is None:
                return False
            session.delete(orm)
            return True


class SqlAppointmentRepository(_SqlRepository, AppointmentRepository):
    def get(self, appointment_id: UUID) -> Optional[Appointment]:
        with self._session() as session:
            orm = session.get(AppointmentORM, appointment_id)
            return orm.to_domain() if orm is not None else None

    def find(
        self,
        *,
        patient_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Appointment]:
        with self._session() as session:
            query = select(AppointmentORM)
            if patient_id is not None:
                query = query.where(AppointmentORM.patient_id == patient_id)
            if start is not None:
                query = query.where(AppointmentORM.date >= start)
            if end is not None:
                query = query.where(AppointmentORM.date <= end)
            return [orm.to_domain() for orm in session.scalars(query)]

    def save(self, appointment: Appointment) -> None:
        with self._session() as session:
            existing = session.get(AppointmentORM, appointment.id)
            if existing is None:
                session.add(AppointmentORM.from_domain(appointment))
            else:
                existing.update_from(appointment)

    def delete(self, appointment_id: UUID) -> bool:
        with self._session() as session:
            orm = session.get(AppointmentORM, appointment_id)
            if orm is None:
                return False
            session.delete(orm)
            return True
