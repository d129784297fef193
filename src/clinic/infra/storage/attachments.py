from __future__ import annotations

import logging
import secrets
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Tuple

from src.clinic.config import settings
from src.clinic.domain.models.treatment import AttachmentType, TreatmentAttachment

logger = logging.getLogger("storage")


class AttachmentStorageBackend(ABC):
    @abstractmethod
    def save_file(self, content: bytes, *, original_name: str) -> Tuple[str, str]:
        """Persist bytes and return ``(stored_name, path)``."""

    @abstractmethod
    def delete_file(self, dest: str) -> None:
        """Best-effort deletion of a previously saved file."""

    @abstractmethod
    def path_for(self, stored_name: str) -> str:
        """Resolve a stored file name to its full path."""


def generate_file_name(original_name: str) -> str:
    """Unique on-disk name: ``<epoch-ms>-<random>-<original name>``."""

    safe_name = Path(original_name).name or "file"
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}-{safe_name}"


class LocalAttachmentStorageBackend(AttachmentStorageBackend):
    def __init__(self, base: Path | None = None) -> None:
        self._base: Path = base or settings.attachments_dir

    def save_file(self, content: bytes, *, original_name: str) -> Tuple[str, str]:
        self._base.mkdir(parents=True, exist_ok=True)
        stored_name = generate_file_name(original_name)
        dest_path = self._base / stored_name
        dest_path.write_bytes(content)
        return stored_name, str(dest_path)

    def delete_file(self, dest: str) -> None:
        path = Path(dest).resolve()
        if not path.is_relative_to(self._base.resolve()):
            logger.warning("Refusing to delete %s outside the attachments directory", dest)
            return
        if path.exists():
            try:
                path.unlink()
            except OSError:
                logger.warning("Could not delete attachment file %s", dest)

    def path_for(self, stored_name: str) -> str:
        return str(self._base / stored_name)


attachment_storage_backend: AttachmentStorageBackend = LocalAttachmentStorageBackend()


def delete_attachment_files(attachments: Iterable[TreatmentAttachment]) -> None:
    for attachment in attachments:
        if attachment.type is AttachmentType.FILE:
            attachment_storage_backend.delete_file(
                attachment.path or attachment_storage_backend.path_for(attachment.data)
            )


def normalize_attachments(attachments: Iterable[TreatmentAttachment] | None) -> List[TreatmentAttachment]:
    """Return attachments with ``path`` filled in for stored files."""

    normalized = []
    for attachment in attachments or []:
        if attachment.type is AttachmentType.FILE and not attachment.path and attachment.data:
            attachment = attachment.model_copy(
                update={"path": attachment_storage_backend.path_for(attachment.data)}
            )
        normalized.append(attachment)
    return normalized


def drop_client_paths(attachments: Iterable[TreatmentAttachment]) -> List[TreatmentAttachment]:
    """Clear ``path`` on file attachments; only ``save_file`` assigns one."""

    return [
        attachment.model_copy(update={"path": None}) if attachment.type is AttachmentType.FILE else attachment
        for attachment in attachments
    ]
