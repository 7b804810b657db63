import copy
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from customs_ops.application.dtos.outcomes import ProviderCallOutcome
from customs_ops.application.dtos.provider import PackageScreeningRequest, PackageScreeningResult
from customs_ops.application.failure_log import FailureLog
from customs_ops.application.interfaces.audit_log_repo import AuditLogRepo
from customs_ops.application.interfaces.clock import Clock
from customs_ops.application.interfaces.package_repo import PackageRepo
from customs_ops.application.interfaces.screening_gateway import ScreeningGatewaySelector
from customs_ops.application.interfaces.transaction_manager import TransactionManager
from customs_ops.application.package_factory import apply_screening_result
from customs_ops.application.provider_errors import (
    describe_provider_error,
    guarded_call,
    parse_provider_data,
)
from customs_ops.domain.entities.audit_log import AuditAction, AuditLogEntry
from customs_ops.domain.errors import PackageNotFoundError, ValidationError
from customs_ops.domain.value_objects.provider_endpoint import ProviderEndpoint


def merge_corrections(original: dict[str, Any], corrections: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge corrections into a copy of the original request; lists are replaced."""
    merged = copy.deepcopy(original)
    for key, value in corrections.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_corrections(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class ResubmitPackageUseCase:
    """
    Corrects a rejected, inconclusive or audit-flagged package and screens it
    again. A failed re-screen leaves the package pending with a retryable
    failure that points back at it.
    """

    def __init__(
        self,
        package_repo: PackageRepo,
        audit_log_repo: AuditLogRepo,
        failure_log: FailureLog,
        gateway_selector: ScreeningGatewaySelector,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._package_repo = package_repo
        self._audit_log_repo = audit_log_repo
        self._failure_log = failure_log
        self._gateway_selector = gateway_selector
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        package_id: int,
        user_id: str,
        corrections: dict[str, Any],
        notes: str | None = None,
    ) -> ProviderCallOutcome:
        async with self._transaction_manager.start():
            package = await self._package_repo.get(package_id, user_id)
            if not package:
                raise PackageNotFoundError(package_id)

            corrected = merge_corrections(package.screening_request, corrections)
            try:
                request = PackageScreeningRequest.model_validate(corrected)
            except PydanticValidationError as exc:
                first = exc.errors()[0]
                field = ".".join(str(part) for part in first["loc"])
                raise ValidationError(field, f"{field}: {first['msg']}") from exc

            gateway = self._gateway_selector.for_environment(package.environment)
            now = self._clock.now()
            previous_status = package.status.value
            previous_code = package.screening_code
            package.resubmit(corrected, notes=notes, corrected_by=user_id, now=now)
            package.updated_at = now
            await self._package_repo.save(package)
            await self._audit_log_repo.add(
                AuditLogEntry(
                    user_id=user_id,
                    action=AuditAction.PACKAGE_RESUBMITTED,
                    entity_type="package",
                    entity_id=package.id,
                    package_id=package.id,
                    upload_id=package.upload_id,
                    changes={
                        "previous_status": previous_status,
                        "previous_screening_code": previous_code,
                        "corrections": corrections,
                        "resubmission_count": package.resubmission_count,
                    },
                    notes=notes,
                    created_at=now,
                )
            )

        payload = request.to_payload()
        result = await guarded_call(
            gateway.screen_package(payload),
            operation="resubmit_screen_package",
            package_id=package.id,
        )
        screening, result = parse_provider_data(result, PackageScreeningResult)

        async with self._transaction_manager.start():
            now = self._clock.now()
            if screening is None:
                record = await self._failure_log.record(
                    user_id=user_id,
                    endpoint=ProviderEndpoint.PACKAGE_SCREEN.value,
                    environment=package.environment,
                    request_body=payload,
                    result=result,
                    package_id=package.id,
                    upload_id=package.upload_id,
                    external_id=package.external_id,
                )
                return ProviderCallOutcome(
                    success=False,
                    message=describe_provider_error(result.error),
                    package=package,
                    failure_id=record.id,
                )

            apply_screening_result(package, screening, now)
            package.updated_at = now
            await self._package_repo.save(package)

        self._logger.info(
            "Package resubmitted",
            extra={
                "package_id": package.id,
                "resubmission_count": package.resubmission_count,
                "package_status": package.status.value,
            },
        )
        return ProviderCallOutcome(
            success=True,
            message="Package resubmitted successfully",
            package=package,
            data=screening.to_payload(),
        )
