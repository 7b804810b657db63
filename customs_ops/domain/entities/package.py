"""Entidad Package - unidad de envío evaluada por el proveedor de screening."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from customs_ops.domain.errors import (
    DutyAlreadyPaidError,
    InvalidPackageStatusError,
    MissingProviderIdError,
    ValidationError,
)


class PackageStatus(str, Enum):
    """Estados del ciclo de vida de un paquete."""

    PENDING = "pending"
    SCREENING = "screening"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    INCONCLUSIVE = "inconclusive"
    AUDIT_REQUIRED = "audit_required"
    AUDIT_SUBMITTED = "audit_submitted"
    DUTY_PENDING = "duty_pending"
    DUTY_PAID = "duty_paid"
    REGISTERED = "registered"


class AuditStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    PENDING = "pending"


RESUBMITTABLE_STATUSES = (
    PackageStatus.REJECTED,
    PackageStatus.INCONCLUSIVE,
    PackageStatus.AUDIT_REQUIRED,
)
DUTY_PAYABLE_STATUSES = (PackageStatus.ACCEPTED, PackageStatus.DUTY_PENDING)
SHIPPABLE_STATUSES = (PackageStatus.ACCEPTED, PackageStatus.DUTY_PAID)

MIN_AUDIT_IMAGES = 2
MAX_AUDIT_REMARK_LENGTH = 100


@dataclass
class Package:
    """
    Paquete evaluado (o por evaluar) ante la aduana.

    `screening_request` guarda la solicitud exacta enviada al proveedor para
    poder re-evaluar el paquete tras una corrección.
    """

    id: int | None = None
    user_id: str = ""
    upload_id: int | None = None
    shipment_id: int | None = None
    environment: str = "sandbox"

    # Identificadores
    external_id: str = ""
    house_bill_number: str | None = None
    barcode: str | None = None
    provider_package_id: str | None = None

    status: PackageStatus = PackageStatus.PENDING

    # Resultado de screening
    screening_code: int | None = None
    screening_status: str | None = None
    screening_response: dict[str, Any] | None = None
    label_qr_code: str | None = None
    screened_at: datetime | None = None

    # Datos del envío
    platform_id: str | None = None
    seller_id: str | None = None
    export_country: str | None = None
    destination_country: str | None = None
    weight_value: Decimal | None = None
    weight_unit: str | None = None
    shipper: dict[str, Any] = field(default_factory=dict)
    consignee: dict[str, Any] = field(default_factory=dict)
    screening_request: dict[str, Any] = field(default_factory=dict)

    # Pago de aranceles
    ddpn: str | None = None
    total_duty: Decimal | None = None
    duty_paid_at: datetime | None = None

    # Auditoría
    audit_status: AuditStatus | None = None
    audit_images: list[str] | None = None
    audit_remark: str | None = None

    # Linaje de re-envíos
    original_package_id: int | None = None
    resubmission_count: int = 0
    correction_notes: str | None = None
    corrected_at: datetime | None = None
    corrected_by: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    # === Screening ===

    def apply_screening(
        self,
        status: PackageStatus,
        code: int,
        provider_status: str | None,
        provider_package_id: str | None,
        label_qr_code: str | None,
        response: dict[str, Any],
        now: datetime,
    ) -> None:
        """Aplica un resultado de screening exitoso."""
        self.status = status
        self.screening_code = code
        self.screening_status = provider_status
        self.provider_package_id = provider_package_id or self.provider_package_id
        self.label_qr_code = label_qr_code
        self.screening_response = response
        self.screened_at = now

    # === Aranceles ===

    def ensure_duty_payable(self) -> None:
        """
        Valida las precondiciones del pago de aranceles.

        Raises:
            MissingProviderIdError: El paquete no fue evaluado por el proveedor.
            DutyAlreadyPaidError: Ya existe un DDPN.
            InvalidPackageStatusError: Estado distinto de accepted/duty_pending.
        """
        if not self.provider_package_id:
            raise MissingProviderIdError("Package has no SafePackage ID - cannot pay duty")
        if self.ddpn:
            raise DutyAlreadyPaidError(self.id, self.ddpn)
        if self.status not in DUTY_PAYABLE_STATUSES:
            raise InvalidPackageStatusError(
                f"Cannot pay duty for package with status '{self.status.value}'. "
                "Package must be accepted.",
                current_status=self.status.value,
            )

    def start_duty_payment(self) -> PackageStatus:
        previous = self.status
        self.status = PackageStatus.DUTY_PENDING
        return previous

    def mark_duty_paid(self, ddpn: str, total_duty: Decimal | None, now: datetime) -> None:
        self.status = PackageStatus.DUTY_PAID
        self.ddpn = ddpn
        self.total_duty = total_duty
        self.duty_paid_at = now

    def rollback_duty_payment(self) -> None:
        self.status = PackageStatus.ACCEPTED

    # === Auditoría ===

    def ensure_auditable(self, images: list[str], remark: str | None) -> None:
        if self.status != PackageStatus.AUDIT_REQUIRED:
            raise InvalidPackageStatusError(
                f"Cannot submit audit for package with status '{self.status.value}'. "
                "Package must require audit.",
                current_status=self.status.value,
            )
        if len(images) < MIN_AUDIT_IMAGES:
            raise ValidationError(
                "images", f"At least {MIN_AUDIT_IMAGES} images are required for audit submission"
            )
        if remark and len(remark) > MAX_AUDIT_REMARK_LENGTH:
            raise ValidationError(
                "remark", f"Remark must be {MAX_AUDIT_REMARK_LENGTH} characters or less"
            )

    def apply_audit_result(
        self,
        status: PackageStatus,
        audit_status: AuditStatus,
        images: list[str],
        remark: str | None,
    ) -> None:
        self.status = status
        self.audit_status = audit_status
        self.audit_images = images
        self.audit_remark = remark

    # === Re-envío ===

    def resubmit(
        self,
        corrected_request: dict[str, Any],
        notes: str | None,
        corrected_by: str,
        now: datetime,
    ) -> None:
        """
        Prepara el paquete para una nueva evaluación tras una corrección.

        Limpia el resultado de screening y registra el linaje de la corrección.
        """
        if self.status not in RESUBMITTABLE_STATUSES:
            raise InvalidPackageStatusError(
                f"Package with status '{self.status.value}' cannot be resubmitted",
                current_status=self.status.value,
            )
        self.screening_request = corrected_request
        self.refresh_from_request(corrected_request)
        self.status = PackageStatus.PENDING
        self.screening_code = None
        self.screening_status = None
        self.correction_notes = notes
        self.corrected_at = now
        self.corrected_by = corrected_by
        self.resubmission_count += 1
        self.original_package_id = self.original_package_id or self.id

    def refresh_from_request(self, request: dict[str, Any]) -> None:
        """Copia a columnas los campos de la solicitud de screening."""
        weight = request.get("weight") or {}
        self.external_id = request.get("externalId", self.external_id)
        self.house_bill_number = request.get("houseBillNumber")
        self.barcode = request.get("barcode")
        self.platform_id = request.get("platformId")
        self.seller_id = request.get("sellerId")
        self.export_country = request.get("exportCountry")
        self.destination_country = request.get("destinationCountry")
        self.weight_value = Decimal(str(weight["value"])) if weight.get("value") is not None else None
        self.weight_unit = weight.get("unit")
        self.shipper = dict(request.get("from") or {})
        self.consignee = dict(request.get("to") or {})

    # === Embarques ===

    def link_to_shipment(self, shipment_id: int) -> None:
        self.shipment_id = shipment_id
        self.status = PackageStatus.REGISTERED

    @property
    def is_shippable(self) -> bool:
        return self.status in SHIPPABLE_STATUSES and bool(self.provider_package_id)

    def unlink_shipment(self) -> None:
        self.shipment_id = None
