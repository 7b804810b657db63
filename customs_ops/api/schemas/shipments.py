from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from customs_ops.api.schemas.packages import PackageResponse
from customs_ops.domain.value_objects.environment import Environment


class MasterBillInput(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    prefix: str
    serial_number: str = Field(alias="serialNumber")


class RegisterShipmentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    environment: Environment = Environment.SANDBOX
    external_id: str
    master_bill: MasterBillInput
    shipper: dict[str, Any]
    consignee: dict[str, Any]
    transportation: dict[str, Any]
    package_ids: list[int]


class ShipmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    environment: str
    external_id: str
    master_bill_number: str
    provider_shipment_id: str | None = None
    status: str
    registered_at: datetime | None = None
    verification_code: int | None = None
    verification_status: str | None = None
    verification_reason_code: str | None = None
    verification_reason_description: str | None = None
    verification_document_type: str | None = None
    verified_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ShipmentDetailResponse(ShipmentResponse):
    packages: list[PackageResponse] = Field(default_factory=list)


class ShipmentListResponse(BaseModel):
    shipments: list[ShipmentResponse]
    total: int
    page: int
    page_size: int


class ShipmentCallResponse(BaseModel):
    success: bool
    message: str
    shipment: ShipmentResponse | None = None
    failure_id: int | None = None
    data: dict[str, Any] | None = None
