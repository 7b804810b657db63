"""Interfaces (Puertos) de la capa de aplicación."""

from customs_ops.application.interfaces.audit_log_repo import AuditLogRepo
from customs_ops.application.interfaces.clock import Clock, FakeClock, SystemClock
from customs_ops.application.interfaces.failure_repo import FailureFilters, FailureRepo
from customs_ops.application.interfaces.package_repo import PackageRepo
from customs_ops.application.interfaces.screening_gateway import (
    ProviderError,
    ProviderResult,
    ScreeningGateway,
    ScreeningGatewaySelector,
)
from customs_ops.application.interfaces.shipment_repo import ShipmentRepo
from customs_ops.application.interfaces.tracking_event_repo import TrackingEventRepo
from customs_ops.application.interfaces.transaction_manager import TransactionManager
from customs_ops.application.interfaces.upload_repo import UploadRepo
from customs_ops.application.interfaces.user_platform_repo import UserPlatformRepo

__all__ = [
    # Repositories
    "AuditLogRepo",
    "FailureFilters",
    "FailureRepo",
    "PackageRepo",
    "ShipmentRepo",
    "TrackingEventRepo",
    "UploadRepo",
    "UserPlatformRepo",
    # Gateways
    "ProviderError",
    "ProviderResult",
    "ScreeningGateway",
    "ScreeningGatewaySelector",
    # Infrastructure
    "TransactionManager",
    # Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
]
