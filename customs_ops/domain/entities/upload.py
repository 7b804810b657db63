"""Entidad Upload - manifiesto de paquetes cargado por un usuario."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from customs_ops.domain.errors import InvalidUploadStatusError


class UploadStatus(str, Enum):
    PENDING = "pending"
    VALIDATING = "validating"
    VALIDATED = "validated"
    VALIDATION_FAILED = "validation_failed"
    PROCESSING = "processing"
    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"
    FAILED = "failed"


@dataclass
class Upload:
    id: int | None = None
    user_id: str = ""
    filename: str = ""
    environment: str = "sandbox"
    status: UploadStatus = UploadStatus.PENDING

    # Cada fila es una solicitud de screening ya mapeada
    rows: list[dict[str, Any]] = field(default_factory=list)
    validation_errors: list[dict[str, Any]] = field(default_factory=list)

    processing_results: dict[str, Any] | None = None
    processing_completed_at: datetime | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    def apply_validation(self, errors: list[dict[str, Any]]) -> None:
        self.validation_errors = errors
        self.status = UploadStatus.VALIDATION_FAILED if errors else UploadStatus.VALIDATED

    def start_processing(self) -> None:
        if self.status != UploadStatus.VALIDATED:
            raise InvalidUploadStatusError(
                "Upload must be validated before processing", current_status=self.status.value
            )
        self.status = UploadStatus.PROCESSING

    def complete(self, results: dict[str, Any], now: datetime) -> None:
        failed = results.get("failed", 0)
        self.status = UploadStatus.COMPLETED_WITH_ERRORS if failed else UploadStatus.COMPLETED
        self.processing_results = results
        self.processing_completed_at = now
