"""Implementaciones in-memory para testing y modo sin base de datos."""

from customs_ops.infrastructure.in_memory.audit_log_repo import InMemoryAuditLogRepo
from customs_ops.infrastructure.in_memory.failure_repo import InMemoryFailureRepo
from customs_ops.infrastructure.in_memory.package_repo import InMemoryPackageRepo
from customs_ops.infrastructure.in_memory.screening_gateway import StubScreeningGateway
from customs_ops.infrastructure.in_memory.shipment_repo import InMemoryShipmentRepo
from customs_ops.infrastructure.in_memory.tracking_event_repo import InMemoryTrackingEventRepo
from customs_ops.infrastructure.in_memory.transaction_manager import NoopTransactionManager as InMemoryTransactionManager
from customs_ops.infrastructure.in_memory.upload_repo import InMemoryUploadRepo
from customs_ops.infrastructure.in_memory.user_platform_repo import InMemoryUserPlatformRepo

__all__ = [
    # Repositories
    "InMemoryAuditLogRepo",
    "InMemoryFailureRepo",
    "InMemoryPackageRepo",
    "InMemoryShipmentRepo",
    "InMemoryTrackingEventRepo",
    "InMemoryUploadRepo",
    "InMemoryUserPlatformRepo",
    # Gateways
    "StubScreeningGateway",
    # Infrastructure
    "InMemoryTransactionManager",
]
