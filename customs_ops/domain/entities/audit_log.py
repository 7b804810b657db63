"""Entidad AuditLogEntry - bitácora append-only de acciones que cambian estado."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class AuditAction(str, Enum):
    ROW_CREATED = "row_created"
    ROW_EDITED = "row_edited"
    ROW_DELETED = "row_deleted"
    BULK_EDIT = "bulk_edit"
    SUBMISSION_REVIEWED = "submission_reviewed"
    SUBMISSION_APPROVED = "submission_approved"
    API_SUBMISSION_CONFIRMED = "api_submission_confirmed"
    PACKAGE_RESUBMITTED = "package_resubmitted"
    VALIDATION_OVERRIDE = "validation_override"
    FAILURE_RESOLVED = "failure_resolved"


@dataclass
class AuditLogEntry:
    id: int | None = None
    user_id: str = ""
    action: AuditAction = AuditAction.ROW_EDITED
    entity_type: str = "package"
    entity_id: int | None = None
    upload_id: int | None = None
    package_id: int | None = None
    shipment_id: int | None = None
    changes: dict[str, Any] = field(default_factory=dict)
    notes: str | None = None
    created_at: datetime | None = None
