from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from customs_ops.domain.value_objects.environment import Environment


class CreateUploadRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    filename: str = Field(min_length=1, max_length=255)
    environment: Environment = Environment.SANDBOX
    rows: list[dict[str, Any]] = Field(min_length=1)


class UploadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    filename: str
    environment: str
    status: str
    total_rows: int
    validation_errors: list[dict[str, Any]] = Field(default_factory=list)
    processing_results: dict[str, Any] | None = None
    processing_completed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
