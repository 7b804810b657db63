from customs_ops.domain.entities.audit_log import AuditAction, AuditLogEntry
from customs_ops.domain.entities.failure_record import FailureRecord, RetryStatus
from customs_ops.domain.entities.package import AuditStatus, Package, PackageStatus
from customs_ops.domain.entities.shipment import DocumentType, Shipment, ShipmentStatus
from customs_ops.domain.entities.tracking_event import TrackedEntity, TrackingEvent
from customs_ops.domain.entities.upload import Upload, UploadStatus
from customs_ops.domain.entities.user_platform import UserPlatform

__all__ = [
    "AuditAction",
    "AuditLogEntry",
    "AuditStatus",
    "DocumentType",
    "FailureRecord",
    "Package",
    "PackageStatus",
    "RetryStatus",
    "Shipment",
    "ShipmentStatus",
    "TrackedEntity",
    "TrackingEvent",
    "Upload",
    "UploadStatus",
    "UserPlatform",
]
