from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from customs_ops.api.schemas.packages import PackageResponse


class FailureResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    endpoint: str
    method: str
    environment: str
    upload_id: int | None = None
    package_id: int | None = None
    shipment_id: int | None = None
    external_id: str | None = None
    row_number: int | None = None
    request_body: dict[str, Any]
    status_code: int | None = None
    error_code: str | None = None
    error_message: str | None = None
    error_details: dict[str, Any] | None = None
    retry_status: str
    retry_count: int
    max_retries: int
    last_retry_at: datetime | None = None
    next_retry_at: datetime | None = None
    resolved_at: datetime | None = None
    resolved_by: str | None = None
    resolution_notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class FailureListResponse(BaseModel):
    failures: list[FailureResponse]
    total: int
    limit: int
    offset: int


class FailureStatsResponse(BaseModel):
    total: int
    pending: int
    retrying: int
    exhausted: int
    manual_required: int
    resolved: int


class RetryResponse(BaseModel):
    success: bool
    message: str
    retry_status: str
    retry_count: int
    next_retry_at: datetime | None = None
    package: PackageResponse | None = None
    error: str | None = None


class BatchRetryRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    failure_ids: list[int] | None = Field(default=None, max_length=500)
    upload_id: int | None = None

    @model_validator(mode="after")
    def _require_selector(self) -> "BatchRetryRequest":
        if not self.failure_ids and self.upload_id is None:
            raise ValueError("Must provide either failure_ids or upload_id")
        return self


class BatchRetryItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    failure_id: int
    external_id: str | None = None
    success: bool
    message: str
    package_id: int | None = None
    provider_package_id: str | None = None
    new_status: str | None = None


class BatchRetrySummary(BaseModel):
    total: int
    successful: int
    failed: int


class BatchRetryResponse(BaseModel):
    summary: BatchRetrySummary
    results: list[BatchRetryItemResponse]
    message: str | None = None


class ResolveFailureRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    notes: str | None = Field(default=None, max_length=1000)
