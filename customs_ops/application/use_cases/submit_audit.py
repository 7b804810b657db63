import logging

from customs_ops.application.dtos.outcomes import ProviderCallOutcome
from customs_ops.application.dtos.provider import AuditResult, PackageAuditRequest
from customs_ops.application.failure_log import FailureLog
from customs_ops.application.interfaces.audit_log_repo import AuditLogRepo
from customs_ops.application.interfaces.clock import Clock
from customs_ops.application.interfaces.package_repo import PackageRepo
from customs_ops.application.interfaces.screening_gateway import ScreeningGatewaySelector
from customs_ops.application.interfaces.transaction_manager import TransactionManager
from customs_ops.application.provider_errors import (
    describe_provider_error,
    guarded_call,
    parse_provider_data,
)
from customs_ops.domain.entities.audit_log import AuditAction, AuditLogEntry
from customs_ops.domain.entities.failure_record import MANUAL_MAX_RETRIES, RetryStatus
from customs_ops.domain.errors import PackageNotFoundError
from customs_ops.domain.result_codes import audit_status_for, package_status_for_audit
from customs_ops.domain.value_objects.provider_endpoint import ProviderEndpoint


class SubmitAuditUseCase:
    """Submits audit evidence for a package the provider flagged for audit."""

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
        images: list[str],
        remark: str | None = None,
    ) -> ProviderCallOutcome:
        async with self._transaction_manager.start():
            package = await self._package_repo.get(package_id, user_id)
            if not package:
                raise PackageNotFoundError(package_id)
        package.ensure_auditable(images, remark)

        gateway = self._gateway_selector.for_environment(package.environment)
        request = PackageAuditRequest(
            packageId=package.provider_package_id,
            externalId=None if package.provider_package_id else package.external_id,
            images=images,
            remark=remark,
        )
        result = await guarded_call(
            gateway.submit_audit(request.to_payload()),
            operation="submit_audit",
            package_id=package.id,
        )
        audit, result = parse_provider_data(result, AuditResult)

        async with self._transaction_manager.start():
            now = self._clock.now()
            if audit is None:
                # Images are large; the failure keeps only their count
                stored_request = {**request.to_payload(), "images": f"[{len(images)} images]"}
                record = await self._failure_log.record(
                    user_id=user_id,
                    endpoint=ProviderEndpoint.PACKAGE_AUDIT.value,
                    environment=package.environment,
                    request_body=stored_request,
                    result=result,
                    max_retries=MANUAL_MAX_RETRIES,
                    retry_status=RetryStatus.MANUAL_REQUIRED,
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

            previous_status = package.status
            package.apply_audit_result(
                status=package_status_for_audit(audit.code),
                audit_status=audit_status_for(audit.code),
                images=images,
                remark=remark,
            )
            package.updated_at = now
            await self._package_repo.save(package)
            await self._audit_log_repo.add(
                AuditLogEntry(
                    user_id=user_id,
                    action=AuditAction.API_SUBMISSION_CONFIRMED,
                    entity_type="package",
                    entity_id=package.id,
                    package_id=package.id,
                    upload_id=package.upload_id,
                    changes={
                        "type": "audit_submission",
                        "audit_code": audit.code,
                        "audit_status": package.audit_status.value,
                        "status": {"from": previous_status.value, "to": package.status.value},
                        "image_count": len(images),
                    },
                    notes=remark,
                    created_at=now,
                )
            )

        self._logger.info(
            "Audit submitted",
            extra={"package_id": package.id, "audit_code": audit.code, "package_status": package.status.value},
        )
        return ProviderCallOutcome(
            success=True,
            message="Audit submitted successfully",
            package=package,
            data=audit.to_payload(),
        )
