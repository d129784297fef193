from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class Patient(BaseModel):
    """A patient record as stored by the patient repository.

    ``id`` is the clinic-assigned numeric identifier supplied by the client on
    creation; it is unique across the store.
    """

    id: int
    name: str
    surname: str
    email: str
    phone_number: str
    fiscal_code: str
    date_of_birth: str = ""
    address: str = ""
    # Free-text medical history, fed into AI prompts when present.
    anamnesis: str = ""
    treatments: List[Any] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
