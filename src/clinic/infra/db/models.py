from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.clinic.domain.models.appointment import Appointment
from src.clinic.domain.models.patient import Patient
from src.clinic.domain.models.treatment import Treatment


class Base(DeclarativeBase):
    pass


class PatientORM(Base):
    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    surname: Mapped[str] = mapped_column(String, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String, nullable=False)
    phone_number: Mapped[str] = mapped_column(String, nullable=False)
    fiscal_code: Mapped[str] = mapped_column(String, nullable=False)
    date_of_birth: Mapped[str] = mapped_column(String, nullable=False, default="")
    address: Mapped[str] = mapped_column(String, nullable=False, default="")
    anamnesis: Mapped[str] = mapped_column(Text, nullable=False, default="")
    treatments: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, index=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    @classmethod
    def from_domain(cls, patient: Patient) -> "PatientORM":
        return cls(**patient.model_dump())

    def update_from(self, patient: Patient) -> None:
        for key, value in patient.model_dump().items():
            setattr(self, key, value)

    def to_domain(self) -> Patient:
        return Patient(
            id=self.id,
            name=self.name,
            surname=self.surname,
            email=self.email,
            phone_number=self.phone_number,
            fiscal_code=self.fiscal_code,
            date_of_birth=self.date_of_birth,
            address=self.address,
            anamnesis=self.anamnesis,
            treatments=list(self.treatments or []),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class TreatmentORM(Base):
    __tablename__ = "treatments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    patient_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    # Stored as text: treatments arrive with either date-only or full ISO
    # date-time values and both forms are preserved.
    date: Mapped[str] = mapped_column(String, nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    attachments: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    ai_analysis: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    @classmethod
    def from_domain(cls, treatment: Treatment) -> "TreatmentORM":
        orm = cls(id=treatment.id)
        orm.update_from(treatment)
        return orm

    def update_from(self, treatment: Treatment) -> None:
        data = treatment.model_dump(mode="json")
        self.patient_id = treatment.patient_id
        self.date = data["date"]
        self.content = treatment.content
        self.attachments = data["attachments"]
        self.ai_analysis = treatment.ai_analysis
        self.created_at = treatment.created_at
        self.updated_at = treatment.updated_at

    def to_domain(self) -> Treatment:
        return Treatment(
            id=self.id,
            patient_id=self.patient_id,
            date=self.date,
            content=self.content,
            attachments=self.attachments or [],
            ai_analysis=self.ai_analysis,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class AppointmentORM(Base):
    __tablename__ = "appointments"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    patient_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    @classmethod
    def from_domain(cls, appointment: Appointment) -> "AppointmentORM":
        return cls(**appointment.model_dump())

    def update_from(self, appointment: Appointment) -> None:
        for key, value in appointment.model_dump().items():
            setattr(self, key, value)

    def to_domain(self) -> Appointment:
        return Appointment(
            id=self.id,
            patient_id=self.patient_id,
            date=self.date,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
