from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from src.clinic.core.dates import normalize_date
from src.clinic.domain.models.treatment import AttachmentType, Treatment, TreatmentAttachment
from src.clinic.errors import Conflict, NotFound, require_fields
from src.clinic.infra.db import inmemory as repos
from src.clinic.infra.storage import attachments as storage

REQUIRED_FIELDS = ["id", "patient_id", "date", "content"]

_UPDATABLE_FIELDS = {"patient_id", "date", "content", "attachments", "ai_analysis"}


def _with_paths(treatment: Treatment) -> Treatment:
    return treatment.model_copy(update={"attachments": storage.normalize_attachments(treatment.attachments)})


def _sort_key(treatment: Treatment) -> Tuple[bool, datetime]:
    parsed = normalize_date(treatment.date)
    # Undated treatments sort after every dated one.
    return parsed is not None, parsed or datetime.min


class TreatmentService:
    def list_treatments(self, *, patient_id: Optional[int] = None) -> List[Treatment]:
        """Treatments, optionally for one patient, most recent first."""

        treatments = repos.treatment_repository.find(patient_id=patient_id)
        treatments.sort(key=_sort_key, reverse=True)
        return [_with_paths(t) for t in treatments]

    def _load(self, treatment_id: int) -> Treatment:
        treatment = repos.treatment_repository.get(treatment_id)
        if treatment is None:
            raise NotFound("Treatment not found")
        return treatment

    def get_treatment(self, treatment_id: int) -> Treatment:
        return _with_paths(self._load(treatment_id))

    def create_treatment(self, data: Dict[str, Any]) -> Treatment:
        require_fields(data, REQUIRED_FIELDS)

        treatment_id = int(data["id"])
        if repos.treatment_repository.get(treatment_id) is not None:
            raise Conflict("Treatment ID already exists")

        now = datetime.now()
        treatment = Treatment(
            id=treatment_id,
            patient_id=int(data["patient_id"]),
            date=data["date"],
            content=data["content"],
            attachments=data.get("attachments") or [],
            created_at=now,
            updated_at=now,
        )
        treatment = treatment.model_copy(update={"attachments": storage.drop_client_paths(treatment.attachments)})
        repos.treatment_repository.save(treatment)
        return _with_paths(treatment)

    def update_treatment(self, treatment_id: int, changes: Dict[str, Any]) -> Treatment:
        treatment = self._load(treatment_id)
        # ai_analysis may be cleared explicitly; other fields ignore nulls.
        update = {
            key: value
            for key, value in changes.items()
            if key in _UPDATABLE_FIELDS and (value is not None or key == "ai_analysis")
        }
        update["updated_at"] = datetime.now()
        # Re-validate so nested attachment dicts become models again.
        updated = Treatment.model_validate({**treatment.model_dump(), **update})
        if "attachments" in update:
            updated = updated.model_copy(update={"attachments": storage.drop_client_paths(updated.attachments)})
        repos.treatment_repository.save(updated)
        return _with_paths(updated)

    def upload_files(self, treatment_id: int, files: Iterable[Tuple[str, bytes]]) -> List[TreatmentAttachment]:
        """Store ``(original_name, content)`` pairs and append them as attachments."""

        treatment = self._load(treatment_id)

        new_attachments: List[TreatmentAttachment] = []
        for original_name, content in files:
            stored_name, path = storage.attachment_storage_backend.save_file(content, original_name=original_name)
            new_attachments.append(
                TreatmentAttachment(
                    type=AttachmentType.FILE,
                    data=stored_name,
                    path=path,
                    original_name=original_name,
                )
            )

        updated = treatment.model_copy(
            update={
                "attachments": [*treatment.attachments, *new_attachments],
                "updated_at": datetime.now(),
            }
        )
        repos.treatment_repository.save(updated)
        return new_attachments

    def delete_treatment(self, treatment_id: int) -> None:
        treatment = self._load(treatment_id)
        if treatment.attachments:
            storage.delete_attachment_files(treatment.attachments)
        if not repos.treatment_repository.delete(treatment_id):
            raise NotFound("Treatment not found")

    def delete_attachment(self, treatment_id: int, attachment_name: str) -> Treatment:
        treatment = self._load(treatment_id)

        def _matches(attachment: TreatmentAttachment) -> bool:
            return attachment.type is AttachmentType.FILE and attachment.data == attachment_name

        storage.delete_attachment_files([a for a in treatment.attachments if _matches(a)])

        updated = treatment.model_copy(
            update={
                "attachments": [a for a in treatment.attachments if not _matches(a)],
                "updated_at": datetime.now(),
            }
        )
        repos.treatment_repository.save(updated)
        return _with_paths(updated)


treatment_service = TreatmentService()
