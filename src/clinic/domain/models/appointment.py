from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class Appointment(BaseModel):
    id: UUID
    patient_id: int
    date: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
