import logging
from decimal import Decimal

from customs_ops.application.dtos.outcomes import ProviderCallOutcome
from customs_ops.application.dtos.provider import DutyPayRequest, DutyPayResult
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
from customs_ops.domain.errors import PackageNotFoundError, ValidationError
from customs_ops.domain.value_objects.provider_endpoint import ProviderEndpoint


class PayDutyUseCase:
    """
    Pays customs duty for an accepted package.

    Guards (provider id, status, existing DDPN) run before anything is
    written. On provider failure the package goes back to `accepted` and a
    manual_required failure is recorded: duty payments are never replayed
    automatically.
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

    async def execute(self, package_id: int, user_id: str) -> ProviderCallOutcome:
        async with self._transaction_manager.start():
            package = await self._package_repo.get(package_id, user_id)
            if not package:
                raise PackageNotFoundError(package_id)
            package.ensure_duty_payable()
            if not package.barcode:
                raise ValidationError("barcode", "Package has no barcode - cannot pay duty")

            gateway = self._gateway_selector.for_environment(package.environment)
            request = DutyPayRequest(packageId=package.provider_package_id, barcode=package.barcode)

            previous_status = package.start_duty_payment()
            package.updated_at = self._clock.now()
            await self._package_repo.save(package)

        payload = request.to_payload()
        result = await guarded_call(gateway.pay_duty(payload), operation="pay_duty", package_id=package.id)
        duty, result = parse_provider_data(result, DutyPayResult)

        async with self._transaction_manager.start():
            now = self._clock.now()
            if duty is None:
                package.rollback_duty_payment()
                package.updated_at = now
                await self._package_repo.save(package)
                record = await self._failure_log.record(
                    user_id=user_id,
                    endpoint=ProviderEndpoint.DUTY_PAY.value,
                    environment=package.environment,
                    request_body=payload,
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

            total_duty = Decimal(str(duty.total_duty)) if duty.total_duty is not None else None
            package.mark_duty_paid(duty.ddpn, total_duty, now)
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
                        "type": "duty_payment",
                        "ddpn": duty.ddpn,
                        "total_duty": duty.total_duty,
                        "previous_status": previous_status.value,
                    },
                    created_at=now,
                )
            )

        self._logger.info(
            "Duty paid",
            extra={"package_id": package.id, "ddpn": duty.ddpn, "environment": package.environment},
        )
        return ProviderCallOutcome(
            success=True,
            message="Duty paid successfully",
            package=package,
            data=duty.to_payload(),
        )
