"""
Narrow schemas for provider API payloads.

Each operation validates the sub-fields it depends on before the payload
crosses the gateway boundary, and parses only the fields it consumes from
the response. Field names follow the provider's camelCase wire format.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _ProviderModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# === Requests ===


class Address(_ProviderModel):
    name: str
    line1: str
    line2: str | None = None
    city: str
    state: str
    postal_code: str = Field(alias="postalCode")
    country: str
    phone: str | None = None
    email: str | None = None


class Weight(_ProviderModel):
    value: float = Field(gt=0)
    unit: Literal["K", "L"] = "K"


class PackageScreeningRequest(_ProviderModel):
    external_id: str = Field(alias="externalId", min_length=1)
    platform_id: str = Field(alias="platformId")
    seller_id: str = Field(alias="sellerId")
    export_country: str = Field(alias="exportCountry")
    destination_country: str = Field(alias="destinationCountry")
    house_bill_number: str = Field(alias="houseBillNumber", max_length=12)
    barcode: str
    invoice_number: str | None = Field(default=None, alias="invoiceNumber", max_length=30)
    container_id: str | None = Field(default=None, alias="containerId")
    carrier_id: str | None = Field(default=None, alias="carrierId")
    weight: Weight
    declared_value: float | None = Field(default=None, alias="declaredValue")
    from_address: Address = Field(alias="from")
    to_address: Address = Field(alias="to")
    products: list[dict[str, Any]] = Field(min_length=1)


class DutyPayRequest(_ProviderModel):
    package_id: str = Field(alias="packageId")
    barcode: str


class PackageAuditRequest(_ProviderModel):
    package_id: str | None = Field(default=None, alias="packageId")
    external_id: str | None = Field(default=None, alias="externalId")
    images: list[str] = Field(min_length=2)
    remark: str | None = Field(default=None, max_length=100)


class MasterBill(_ProviderModel):
    prefix: str = Field(min_length=1, max_length=4)
    serial_number: str = Field(alias="serialNumber", min_length=1, max_length=11)


class ShipmentRegistrationRequest(_ProviderModel):
    external_id: str = Field(alias="externalId", min_length=1)
    master_bill: MasterBill = Field(alias="masterBill")
    shipper: dict[str, Any]
    consignee: dict[str, Any]
    transportation: dict[str, Any]
    package_ids: list[str] = Field(alias="packageIds", min_length=1)


# === Responses ===


class Reason(_ProviderModel):
    code: str | None = None
    description: str | None = None


class PackageScreeningResult(_ProviderModel):
    package_id: str | None = Field(default=None, alias="packageId")
    external_id: str | None = Field(default=None, alias="externalId")
    code: int
    status: str | None = None
    label_qr_code: str | None = Field(default=None, alias="labelQrCode")


class DutyPayResult(_ProviderModel):
    package_id: str | None = Field(default=None, alias="packageId")
    ddpn: str
    total_duty: float | None = Field(default=None, alias="totalDuty")


class AuditResult(_ProviderModel):
    package_id: str | None = Field(default=None, alias="packageId")
    code: int
    status: str | None = None


class ShipmentRegistrationResult(_ProviderModel):
    shipment_id: str = Field(alias="shipmentId")


class VerificationDocument(_ProviderModel):
    type: Literal["PNG", "JPEG", "WEBM"]
    content: str


class VerificationResult(_ProviderModel):
    shipment_id: str | None = Field(default=None, alias="shipmentId")
    code: int
    status: str | None = None
    reason: Reason | None = None
    document: VerificationDocument | None = None


class ProviderTrackingEvent(_ProviderModel):
    type: str
    description: str | None = None
    time: datetime
    data: dict[str, Any] | None = None


class TrackingResult(_ProviderModel):
    events: list[ProviderTrackingEvent] = Field(default_factory=list)


class Platform(_ProviderModel):
    id: str
    url: str | None = None

    @field_validator("id")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()
