from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class AttachmentType(str, Enum):
    FILE = "file"
    TEXT = "text"


class TreatmentAttachment(BaseModel):
    type: AttachmentType
    # Inline text for TEXT attachments, stored file name for FILE attachments.
    data: str
    path: Optional[str] = None
    original_name: Optional[str] = None


class Treatment(BaseModel):
    id: int
    patient_id: int
    # Kept exactly as submitted: either a datetime or a string such as
    # "2024-06-10" or "2024-06-10T09:30:00Z".
    date: Union[datetime, str]
    content: str
    attachments: List[TreatmentAttachment] = Field(default_factory=list)
    ai_analysis: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
