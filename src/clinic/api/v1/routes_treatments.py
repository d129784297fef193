from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from fastapi import APIRouter, File, Form, Response, UploadFile, status
from pydantic import BaseModel

from src.clinic.config import settings
from src.clinic.domain.models.treatment import Treatment, TreatmentAttachment
from src.clinic.errors import ClinicError
from src.clinic.services.audit.service import audit_service
from src.clinic.services.treatments.service import treatment_service


router = APIRouter(prefix="/treatments", tags=["treatments"])


class TreatmentCreateRequest(BaseModel):
    id: int
    patient_id: int
    date: Union[datetime, str]
    content: str
    attachments: Optional[List[TreatmentAttachment]] = None


class TreatmentUpdateRequest(BaseModel):
    patient_id: Optional[int] = None
    date: Union[datetime, str, None] = None
    content: Optional[str] = None
    attachments: Optional[List[TreatmentAttachment]] = None
    ai_analysis: Optional[str] = None


@router.get("/", response_model=List[Treatment])
async def list_treatments(patient_id: Optional[int] = None) -> List[Treatment]:
    return treatment_service.list_treatments(patient_id=patient_id)


@router.get("/{treatment_id}", response_model=Treatment)
async def get_treatment(treatment_id: int) -> Treatment:
    return treatment_service.get_treatment(treatment_id)


@router.post("/file-submit", response_model=List[TreatmentAttachment], status_code=status.HTTP_201_CREATED)
async def submit_files(
    treatment_id: int = Form(...),
    files: List[UploadFile] = File(...),
) -> List[TreatmentAttachment]:
    """Attach uploaded files to an existing treatment.

    Files are written under ATTACHMENTS_DIR with a unique name; only the new
    attachments are returned.
    """

    uploads = []
    for upload in files:
        content = await upload.read()
        if len(content) > settings.max_upload_bytes:
            raise ClinicError(
                "Uploaded file too large.",
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                error_code="Validation Error",
            )
        uploads.append((upload.filename or "file", content))

    attachments = treatment_service.upload_files(treatment_id, uploads)
    audit_service.log_event(
        action="upload_attachments",
        resource_type="treatment",
        resource_id=str(treatment_id),
        extra={"count": len(attachments)},
    )
    return attachments


@router.post("/", response_model=Treatment, status_code=status.HTTP_201_CREATED)
async def create_treatment(payload: TreatmentCreateRequest) -> Treatment:
    treatment = treatment_service.create_treatment(payload.model_dump(exclude_none=True))
    audit_service.log_event(
        action="create_treatment",
        resource_type="treatment",
        resource_id=str(treatment.id),
        extra={"patient_id": treatment.patient_id},
    )
    return treatment


@router.put("/{treatment_id}", response_model=Treatment)
async def update_treatment(treatment_id: int, payload: TreatmentUpdateRequest) -> Treatment:
    changes = payload.model_dump(exclude_unset=True)
    treatment = treatment_service.update_treatment(treatment_id, changes)
    audit_service.log_event(
        action="update_treatment",
        resource_type="treatment",
        resource_id=str(treatment_id),
        extra={"fields": sorted(changes)},
    )
    return treatment


@router.delete("/{treatment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_treatment(treatment_id: int) -> Response:
    treatment_service.delete_treatment(treatment_id)
    audit_service.log_event(action="delete_treatment", resource_type="treatment", resource_id=str(treatment_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{treatment_id}/attachments/{attachment_name}", response_model=Treatment)
async def delete_attachment(treatment_id: int, attachment_name: str) -> Treatment:
    treatment = treatment_service.delete_attachment(treatment_id, attachment_name)
    audit_service.log_event(
        action="delete_attachment",
        resource_type="treatment",
        resource_id=str(treatment_id),
    )
    return treatment
