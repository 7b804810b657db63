from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PackageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    upload_id: int | None = None
    shipment_id: int | None = None
    environment: str
    external_id: str
    house_bill_number: str | None = None
    barcode: str | None = None
    provider_package_id: str | None = None
    status: str
    screening_code: int | None = None
    screening_status: str | None = None
    label_qr_code: str | None = None
    screened_at: datetime | None = None
    platform_id: str | None = None
    seller_id: str | None = None
    export_country: str | None = None
    destination_country: str | None = None
    weight_value: Decimal | None = None
    weight_unit: str | None = None
    ddpn: str | None = None
    total_duty: Decimal | None = None
    duty_paid_at: datetime | None = None
    audit_status: str | None = None
    audit_remark: str | None = None
    original_package_id: int | None = None
    resubmission_count: int = 0
    correction_notes: str | None = None
    corrected_at: datetime | None = None
    corrected_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PackageDetailResponse(PackageResponse):
    shipper: dict[str, Any] = Field(default_factory=dict)
    consignee: dict[str, Any] = Field(default_factory=dict)
    screening_request: dict[str, Any] = Field(default_factory=dict)
    screening_response: dict[str, Any] | None = None


class PackageListResponse(BaseModel):
    packages: list[PackageResponse]
    total: int
    limit: int
    offset: int


class ProviderCallResponse(BaseModel):
    success: bool
    message: str
    package: PackageResponse | None = None
    failure_id: int | None = None
    data: dict[str, Any] | None = None


class AuditSubmissionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    images: list[str]
    remark: str | None = None


class ResubmitRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    corrections: dict[str, Any] = Field(default_factory=dict)
    notes: str | None = Field(default=None, max_length=1000)


class TrackingEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_type: str
    event_description: str | None = None
    event_time: datetime | None = None
    event_data: dict[str, Any] | None = None


class TrackingResponse(BaseModel):
    success: bool
    provider_id: str
    events: list[TrackingEventResponse]
    source: str
    api_error: str | None = None
