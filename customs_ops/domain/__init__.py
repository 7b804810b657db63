"""
Capa de Dominio - Operaciones aduanales.

Contiene la lógica de negocio pura, sin dependencias de frameworks.

Estructura:
- entities/: Entidades (Package, Shipment, FailureRecord, etc.)
- value_objects/: Ambiente, endpoints del proveedor y calendario de backoff
- result_codes.py: Traducción de códigos del proveedor a estados
- errors.py: Excepciones específicas del dominio
"""

from customs_ops.domain.entities import (
    AuditAction,
    AuditLogEntry,
    FailureRecord,
    Package,
    PackageStatus,
    RetryStatus,
    Shipment,
    ShipmentStatus,
    Upload,
    UploadStatus,
)
from customs_ops.domain.errors import DomainError, NotFoundError
from customs_ops.domain.value_objects import Environment, ProviderEndpoint

__all__ = [
    "AuditAction",
    "AuditLogEntry",
    "FailureRecord",
    "Package",
    "PackageStatus",
    "RetryStatus",
    "Shipment",
    "ShipmentStatus",
    "Upload",
    "UploadStatus",
    "DomainError",
    "NotFoundError",
    "Environment",
    "ProviderEndpoint",
]
