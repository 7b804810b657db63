"""Entidad Shipment - agrupa paquetes aceptados bajo un master bill."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from customs_ops.domain.errors import InvalidShipmentStatusError, MissingProviderIdError


class ShipmentStatus(str, Enum):
    PENDING = "pending"
    REGISTERED = "registered"
    VERIFICATION_PENDING = "verification_pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
    FAILED = "failed"


class DocumentType(str, Enum):
    """Tipos de documento de verificación y su media type."""

    PNG = "PNG"
    JPEG = "JPEG"
    WEBM = "WEBM"

    @property
    def media_type(self) -> str:
        if self is DocumentType.PNG:
            return "image/png"
        if self is DocumentType.JPEG:
            return "image/jpeg"
        return "video/webm"

    @property
    def extension(self) -> str:
        return self.value.lower()


@dataclass
class Shipment:
    id: int | None = None
    user_id: str = ""
    environment: str = "sandbox"
    external_id: str = ""
    master_bill_prefix: str = ""
    master_bill_serial: str = ""
    provider_shipment_id: str | None = None
    status: ShipmentStatus = ShipmentStatus.PENDING

    # Snapshot de la solicitud de registro
    registration_request: dict[str, Any] = field(default_factory=dict)
    registered_at: datetime | None = None

    # Verificación
    verification_code: int | None = None
    verification_status: str | None = None
    verification_reason_code: str | None = None
    verification_reason_description: str | None = None
    verification_document_type: DocumentType | None = None
    verification_document: str | None = None  # base64
    verified_at: datetime | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def master_bill_number(self) -> str:
        return f"{self.master_bill_prefix}-{self.master_bill_serial}"

    def mark_registered(self, provider_shipment_id: str, now: datetime) -> None:
        self.provider_shipment_id = provider_shipment_id
        self.status = ShipmentStatus.REGISTERED
        self.registered_at = now

    def mark_failed(self) -> None:
        self.status = ShipmentStatus.FAILED

    def ensure_verifiable(self) -> None:
        if not self.provider_shipment_id:
            raise MissingProviderIdError("Shipment has not been registered with SafePackage")

    def start_verification(self) -> None:
        self.status = ShipmentStatus.VERIFICATION_PENDING

    def mark_verified(
        self,
        code: int,
        provider_status: str | None,
        document_type: DocumentType | None,
        document: str | None,
        now: datetime,
    ) -> None:
        self.status = ShipmentStatus.VERIFIED
        self.verification_code = code
        self.verification_status = provider_status
        self.verification_document_type = document_type
        self.verification_document = document
        self.verified_at = now

    def mark_rejected(
        self,
        code: int,
        provider_status: str | None,
        reason_code: str | None,
        reason_description: str | None,
    ) -> None:
        self.status = ShipmentStatus.REJECTED
        self.verification_code = code
        self.verification_status = provider_status
        self.verification_reason_code = reason_code
        self.verification_reason_description = reason_description

    def ensure_deletable(self) -> None:
        if self.status != ShipmentStatus.PENDING:
            raise InvalidShipmentStatusError(
                "Only pending shipments can be deleted", current_status=self.status.value
            )

    @property
    def is_verified(self) -> bool:
        return self.status == ShipmentStatus.VERIFIED
