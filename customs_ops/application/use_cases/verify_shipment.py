import logging

from customs_ops.application.dtos.outcomes import ProviderCallOutcome
from customs_ops.application.dtos.provider import VerificationResult
from customs_ops.application.failure_log import FailureLog
from customs_ops.application.interfaces.clock import Clock
from customs_ops.application.interfaces.screening_gateway import ScreeningGatewaySelector
from customs_ops.application.interfaces.shipment_repo import ShipmentRepo
from customs_ops.application.interfaces.transaction_manager import TransactionManager
from customs_ops.application.provider_errors import (
    describe_provider_error,
    guarded_call,
    parse_provider_data,
)
from customs_ops.domain.entities.failure_record import MANUAL_MAX_RETRIES, RetryStatus
from customs_ops.domain.entities.shipment import DocumentType, ShipmentStatus
from customs_ops.domain.errors import ShipmentNotFoundError
from customs_ops.domain.result_codes import shipment_status_for_verification
from customs_ops.domain.value_objects.provider_endpoint import ProviderEndpoint


class VerifyShipmentUseCase:
    def __init__(
        self,
        shipment_repo: ShipmentRepo,
        failure_log: FailureLog,
        gateway_selector: ScreeningGatewaySelector,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._shipment_repo = shipment_repo
        self._failure_log = failure_log
        self._gateway_selector = gateway_selector
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, shipment_id: int, user_id: str) -> ProviderCallOutcome:
        async with self._transaction_manager.start():
            shipment = await self._shipment_repo.get(shipment_id, user_id)
            if not shipment:
                raise ShipmentNotFoundError(shipment_id)
            shipment.ensure_verifiable()
            if shipment.is_verified:
                return ProviderCallOutcome(
                    success=True, message="Shipment already verified", shipment=shipment
                )

            gateway = self._gateway_selector.for_environment(shipment.environment)
            shipment.start_verification()
            shipment.updated_at = self._clock.now()
            await self._shipment_repo.save(shipment)

        result = await guarded_call(
            gateway.verify_shipment(shipment.provider_shipment_id),
            operation="verify_shipment",
            shipment_id=shipment.id,
        )
        verification, result = parse_provider_data(result, VerificationResult)

        async with self._transaction_manager.start():
            now = self._clock.now()
            if verification is None:
                shipment.mark_failed()
                shipment.updated_at = now
                await self._shipment_repo.save(shipment)
                record = await self._failure_log.record(
                    user_id=user_id,
                    endpoint=ProviderEndpoint.SHIPMENT_VERIFY.value,
                    environment=shipment.environment,
                    request_body={"shipmentId": shipment.provider_shipment_id},
                    result=result,
                    max_retries=MANUAL_MAX_RETRIES,
                    retry_status=RetryStatus.MANUAL_REQUIRED,
                    shipment_id=shipment.id,
                    external_id=shipment.external_id,
                )
                return ProviderCallOutcome(
                    success=False,
                    message=describe_provider_error(result.error),
                    shipment=shipment,
                    failure_id=record.id,
                )

            if shipment_status_for_verification(verification.code) == ShipmentStatus.VERIFIED:
                document = verification.document
                shipment.mark_verified(
                    code=verification.code,
                    provider_status=verification.status,
                    document_type=DocumentType(document.type) if document else None,
                    document=document.content if document else None,
                    now=now,
                )
                message = "Shipment verified"
            else:
                reason = verification.reason
                shipment.mark_rejected(
                    code=verification.code,
                    provider_status=verification.status,
                    reason_code=reason.code if reason else None,
                    reason_description=reason.description if reason else None,
                )
                message = "Shipment rejected"
            shipment.updated_at = now
            await self._shipment_repo.save(shipment)

        self._logger.info(
            "Shipment verification completed",
            extra={
                "shipment_id": shipment.id,
                "verification_code": verification.code,
                "shipment_status": shipment.status.value,
            },
        )
        return ProviderCallOutcome(
            success=True,
            message=message,
            shipment=shipment,
            data={"code": verification.code, "status": verification.status},
        )
