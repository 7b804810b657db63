from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from customs_ops.api.deps import AsyncSessionLocal
from customs_ops.application.failure_log import FailureLog
from customs_ops.application.interfaces.clock import SystemClock
from customs_ops.application.interfaces.screening_gateway import ScreeningGatewaySelector
from customs_ops.application.use_cases.batch_retry_failures import BatchRetryFailuresUseCase
from customs_ops.application.use_cases.create_upload import CreateUploadUseCase, GetUploadUseCase
from customs_ops.application.use_cases.export_documents import (
    ExportCommercialInvoiceUseCase,
    ExportPackingListUseCase,
    ExportShipmentRegisterUseCase,
)
from customs_ops.application.use_cases.get_tracking import GetTrackingUseCase
from customs_ops.application.use_cases.list_failures import (
    GetFailureStatsUseCase,
    GetFailureUseCase,
    ListFailuresUseCase,
)
from customs_ops.application.use_cases.list_platforms import (
    ListPlatformsUseCase,
    ListRemotePlatformsUseCase,
)
from customs_ops.application.use_cases.package_queries import GetPackageUseCase, ListPackagesUseCase
from customs_ops.application.use_cases.pay_duty import PayDutyUseCase
from customs_ops.application.use_cases.process_upload import ProcessUploadUseCase
from customs_ops.application.use_cases.register_shipment import RegisterShipmentUseCase
from customs_ops.application.use_cases.resolve_failure import ResolveFailureUseCase
from customs_ops.application.use_cases.resubmit_package import ResubmitPackageUseCase
from customs_ops.application.use_cases.retry_failure import RetryFailureUseCase
from customs_ops.application.use_cases.shipment_queries import (
    DeleteShipmentUseCase,
    GetShipmentDocumentUseCase,
    GetShipmentUseCase,
    ListShipmentsUseCase,
)
from customs_ops.application.use_cases.submit_audit import SubmitAuditUseCase
from customs_ops.application.use_cases.user_platforms import (
    DeleteUserPlatformUseCase,
    ListUserPlatformsUseCase,
    SaveUserPlatformUseCase,
    UpdateUserPlatformUseCase,
)
from customs_ops.application.use_cases.verify_shipment import VerifyShipmentUseCase
from customs_ops.config import Settings, get_settings
from customs_ops.domain.errors import ValidationError
from customs_ops.domain.value_objects.environment import Environment
from customs_ops.infrastructure.db.repositories.audit_log_repo_sql import AuditLogRepoSQL
from customs_ops.infrastructure.db.repositories.failure_repo_sql import FailureRepoSQL
from customs_ops.infrastructure.db.repositories.package_repo_sql import PackageRepoSQL
from customs_ops.infrastructure.db.repositories.shipment_repo_sql import ShipmentRepoSQL
from customs_ops.infrastructure.db.repositories.tracking_event_repo_sql import TrackingEventRepoSQL
from customs_ops.infrastructure.db.repositories.upload_repo_sql import UploadRepoSQL
from customs_ops.infrastructure.db.repositories.user_platform_repo_sql import UserPlatformRepoSQL
from customs_ops.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from customs_ops.infrastructure.gateways.factory import build_gateway_selector
from customs_ops.infrastructure.in_memory import (
    InMemoryAuditLogRepo,
    InMemoryFailureRepo,
    InMemoryPackageRepo,
    InMemoryShipmentRepo,
    InMemoryTrackingEventRepo,
    InMemoryTransactionManager,
    InMemoryUploadRepo,
    InMemoryUserPlatformRepo,
    StubScreeningGateway,
)


async def get_session(settings: Settings = Depends(get_settings)) -> AsyncSession | None:
    if settings.use_in_memory:
        yield None
        return
    async with AsyncSessionLocal() as session:
        yield session


def get_user_id(x_user_id: str = Header(alias="X-User-Id")) -> str:
    """Acting user. Authentication happens upstream; the id is trusted as given."""
    if not x_user_id.strip():
        raise ValidationError("X-User-Id", "X-User-Id header is required")
    return x_user_id.strip()


@lru_cache(maxsize=1)
def _in_memory_bundle() -> dict[str, Any]:
    gateway_selector = ScreeningGatewaySelector()
    for environment in Environment:
        gateway_selector.register(environment, StubScreeningGateway(environment))
    return {
        "failure_repo": InMemoryFailureRepo(),
        "package_repo": InMemoryPackageRepo(),
        "shipment_repo": InMemoryShipmentRepo(),
        "upload_repo": InMemoryUploadRepo(),
        "audit_log_repo": InMemoryAuditLogRepo(),
        "tracking_event_repo": InMemoryTrackingEventRepo(),
        "user_platform_repo": InMemoryUserPlatformRepo(),
        "tx_manager": InMemoryTransactionManager(),
        "gateway_selector": gateway_selector,
        "clock": SystemClock(),
    }


@lru_cache(maxsize=1)
def _http_gateway_selector() -> ScreeningGatewaySelector:
    return build_gateway_selector(get_settings())


def _sql_ports(session: AsyncSession) -> dict[str, Any]:
    return {
        "failure_repo": FailureRepoSQL(session),
        "package_repo": PackageRepoSQL(session),
        "shipment_repo": ShipmentRepoSQL(session),
        "upload_repo": UploadRepoSQL(session),
        "audit_log_repo": AuditLogRepoSQL(session),
        "tracking_event_repo": TrackingEventRepoSQL(session),
        "user_platform_repo": UserPlatformRepoSQL(session),
        "tx_manager": SQLAlchemyTransactionManager(session),
        "gateway_selector": _http_gateway_selector(),
        "clock": SystemClock(),
    }


def _retry_engine(ports: dict[str, Any], settings: Settings) -> RetryFailureUseCase:
    return RetryFailureUseCase(
        failure_repo=ports["failure_repo"],
        package_repo=ports["package_repo"],
        failure_log=FailureLog(ports["failure_repo"], ports["clock"]),
        gateway_selector=ports["gateway_selector"],
        transaction_manager=ports["tx_manager"],
        clock=ports["clock"],
        enforce_schedule=settings.enforce_retry_schedule,
    )


def _retry_scope_factory(settings: Settings):
    """Each batch item gets its own engine; in SQL mode, its own session."""
    if settings.use_in_memory:

        @asynccontextmanager
        async def in_memory_scope() -> AsyncIterator[RetryFailureUseCase]:
            yield _retry_engine(_in_memory_bundle(), settings)

        return in_memory_scope

    @asynccontextmanager
    async def sql_scope() -> AsyncIterator[RetryFailureUseCase]:
        async with AsyncSessionLocal() as session:
            yield _retry_engine(_sql_ports(session), settings)

    return sql_scope


def build_use_cases(ports: dict[str, Any], settings: Settings, retry_scope) -> dict[str, Any]:
    failure_repo = ports["failure_repo"]
    package_repo = ports["package_repo"]
    shipment_repo = ports["shipment_repo"]
    upload_repo = ports["upload_repo"]
    audit_log_repo = ports["audit_log_repo"]
    tracking_event_repo = ports["tracking_event_repo"]
    user_platform_repo = ports["user_platform_repo"]
    tx_manager = ports["tx_manager"]
    gateway_selector = ports["gateway_selector"]
    clock = ports["clock"]
    failure_log = FailureLog(failure_repo, clock)

    provider_deps = {
        "failure_log": failure_log,
        "gateway_selector": gateway_selector,
        "transaction_manager": tx_manager,
        "clock": clock,
    }
    return {
        # Failures
        "list_failures": ListFailuresUseCase(failure_log),
        "get_failure": GetFailureUseCase(failure_log),
        "failure_stats": GetFailureStatsUseCase(failure_log),
        "retry_failure": _retry_engine(ports, settings),
        "batch_retry": BatchRetryFailuresUseCase(failure_repo=failure_repo, retry_scope=retry_scope),
        "resolve_failure": ResolveFailureUseCase(
            failure_repo=failure_repo,
            audit_log_repo=audit_log_repo,
            transaction_manager=tx_manager,
            clock=clock,
        ),
        # Packages
        "list_packages": ListPackagesUseCase(package_repo),
        "get_package": GetPackageUseCase(package_repo),
        "pay_duty": PayDutyUseCase(package_repo=package_repo, audit_log_repo=audit_log_repo, **provider_deps),
        "submit_audit": SubmitAuditUseCase(
            package_repo=package_repo, audit_log_repo=audit_log_repo, **provider_deps
        ),
        "resubmit_package": ResubmitPackageUseCase(
            package_repo=package_repo, audit_log_repo=audit_log_repo, **provider_deps
        ),
        "get_tracking": GetTrackingUseCase(
            package_repo=package_repo,
            shipment_repo=shipment_repo,
            tracking_event_repo=tracking_event_repo,
            gateway_selector=gateway_selector,
            transaction_manager=tx_manager,
            clock=clock,
        ),
        # Uploads
        "create_upload": CreateUploadUseCase(upload_repo=upload_repo, transaction_manager=tx_manager, clock=clock),
        "get_upload": GetUploadUseCase(upload_repo),
        "process_upload": ProcessUploadUseCase(
            upload_repo=upload_repo, package_repo=package_repo, **provider_deps
        ),
        # Shipments
        "register_shipment": RegisterShipmentUseCase(
            shipment_repo=shipment_repo, package_repo=package_repo, **provider_deps
        ),
        "verify_shipment": VerifyShipmentUseCase(shipment_repo=shipment_repo, **provider_deps),
        "list_shipments": ListShipmentsUseCase(shipment_repo),
        "get_shipment": GetShipmentUseCase(shipment_repo, package_repo),
        "get_shipment_document": GetShipmentDocumentUseCase(shipment_repo),
        "delete_shipment": DeleteShipmentUseCase(
            shipment_repo=shipment_repo, package_repo=package_repo, transaction_manager=tx_manager
        ),
        # Platforms
        "list_platforms": ListPlatformsUseCase(),
        "list_remote_platforms": ListRemotePlatformsUseCase(gateway_selector),
        "list_user_platforms": ListUserPlatformsUseCase(user_platform_repo),
        "save_user_platform": SaveUserPlatformUseCase(
            user_platform_repo=user_platform_repo, transaction_manager=tx_manager, clock=clock
        ),
        "update_user_platform": UpdateUserPlatformUseCase(
            user_platform_repo=user_platform_repo, transaction_manager=tx_manager, clock=clock
        ),
        "delete_user_platform": DeleteUserPlatformUseCase(
            user_platform_repo=user_platform_repo, transaction_manager=tx_manager
        ),
        # Exports
        "export_shipment_register": ExportShipmentRegisterUseCase(package_repo, clock),
        "export_packing_list": ExportPackingListUseCase(package_repo, clock),
        "export_commercial_invoice": ExportCommercialInvoiceUseCase(package_repo, clock),
    }


def get_use_cases(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
) -> dict[str, Any]:
    if settings.use_in_memory:
        return build_use_cases(_in_memory_bundle(), settings, _retry_scope_factory(settings))

    if not session:
        raise RuntimeError("DB session not available")
    return build_use_cases(_sql_ports(session), settings, _retry_scope_factory(settings))
