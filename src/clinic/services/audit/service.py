from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger("audit")

# Record fields that hold clinical free text and must never reach the audit log.
CLINICAL_TEXT_FIELDS = frozenset({"anamnesis", "content", "ai_analysis", "summary", "prompt"})


@dataclass
class AuditEvent:
    """One mutating action on a patient, treatment or appointment.

    Only identifiers, resource kinds and small metadata (counts, changed field
    names) are recorded; clinical text is stripped from ``extra``.
    """

    action: str
    resource_type: str
    resource_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_json(self) -> str:
        return json.dumps(asdict(self), default=str, sort_keys=True)


def scrub_extra(extra: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {key: value for key, value in (extra or {}).items() if key not in CLINICAL_TEXT_FIELDS}


class AuditService:
    def log_event(
        self,
        *,
        action: str,
        resource_type: str,
        resource_id: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> AuditEvent:
        """Record one action as a single JSON line on the ``audit`` logger.

        - `action`: verb plus resource, e.g. "create_patient", "upload_attachments".
        - `resource_type`: "patient", "treatment" or "appointment".
        - `resource_id`: the record id as a string.
        """

        event = AuditEvent(
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            extra=scrub_extra(extra),
        )
        logger.info(event.to_json())
        return event


audit_service = AuditService()
