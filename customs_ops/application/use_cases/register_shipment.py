import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from customs_ops.application.dtos.outcomes import ProviderCallOutcome
from customs_ops.application.dtos.provider import (
    ShipmentRegistrationRequest,
    ShipmentRegistrationResult,
)
from customs_ops.application.failure_log import FailureLog
from customs_ops.application.interfaces.clock import Clock
from customs_ops.application.interfaces.package_repo import PackageRepo
from customs_ops.application.interfaces.screening_gateway import ScreeningGatewaySelector
from customs_ops.application.interfaces.shipment_repo import ShipmentRepo
from customs_ops.application.interfaces.transaction_manager import TransactionManager
from customs_ops.application.provider_errors import (
    describe_provider_error,
    guarded_call,
    parse_provider_data,
)
from customs_ops.domain.entities.failure_record import MANUAL_MAX_RETRIES, RetryStatus
from customs_ops.domain.entities.package import Package
from customs_ops.domain.entities.shipment import Shipment
from customs_ops.domain.errors import (
    InvalidPackageStatusError,
    PackageNotFoundError,
    ValidationError,
)
from customs_ops.domain.value_objects.provider_endpoint import ProviderEndpoint


class RegisterShipmentUseCase:
    """
    Groups accepted packages under a master bill and registers the shipment
    with the provider. The shipment row exists (as pending) before the call so
    a failure can be traced to it.
    """

    def __init__(
        self,
        shipment_repo: ShipmentRepo,
        package_repo: PackageRepo,
        failure_log: FailureLog,
        gateway_selector: ScreeningGatewaySelector,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._shipment_repo = shipment_repo
        self._package_repo = package_repo
        self._failure_log = failure_log
        self._gateway_selector = gateway_selector
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        user_id: str,
        environment: str,
        external_id: str,
        master_bill: dict[str, Any],
        shipper: dict[str, Any],
        consignee: dict[str, Any],
        transportation: dict[str, Any],
        package_ids: list[int],
    ) -> ProviderCallOutcome:
        environment = getattr(environment, "value", environment)
        if not package_ids:
            raise ValidationError("package_ids", "At least one package is required")

        async with self._transaction_manager.start():
            packages = await self._load_packages(package_ids, user_id, environment)
            try:
                request = ShipmentRegistrationRequest.model_validate(
                    {
                        "externalId": external_id,
                        "masterBill": master_bill,
                        "shipper": shipper,
                        "consignee": consignee,
                        "transportation": transportation,
                        "packageIds": [p.provider_package_id for p in packages],
                    }
                )
            except PydanticValidationError as exc:
                first = exc.errors()[0]
                field = ".".join(str(part) for part in first["loc"])
                raise ValidationError(field, f"{field}: {first['msg']}") from exc

            gateway = self._gateway_selector.for_environment(environment)
            now = self._clock.now()
            shipment = await self._shipment_repo.add(
                Shipment(
                    user_id=user_id,
                    environment=environment,
                    external_id=external_id,
                    master_bill_prefix=request.master_bill.prefix,
                    master_bill_serial=request.master_bill.serial_number,
                    registration_request=request.to_payload(),
                    created_at=now,
                    updated_at=now,
                )
            )

        payload = request.to_payload()
        result = await guarded_call(
            gateway.register_shipment(payload),
            operation="register_shipment",
            shipment_id=shipment.id,
        )
        registration, result = parse_provider_data(result, ShipmentRegistrationResult)

        async with self._transaction_manager.start():
            now = self._clock.now()
            if registration is None:
                shipment.mark_failed()
                shipment.updated_at = now
                await self._shipment_repo.save(shipment)
                record = await self._failure_log.record(
                    user_id=user_id,
                    endpoint=ProviderEndpoint.SHIPMENT_REGISTER.value,
                    environment=environment,
                    request_body=payload,
                    result=result,
                    max_retries=MANUAL_MAX_RETRIES,
                    retry_status=RetryStatus.MANUAL_REQUIRED,
                    shipment_id=shipment.id,
                    external_id=external_id,
                )
                return ProviderCallOutcome(
                    success=False,
                    message=describe_provider_error(result.error),
                    shipment=shipment,
                    failure_id=record.id,
                )

            shipment.mark_registered(registration.shipment_id, now)
            shipment.updated_at = now
            await self._shipment_repo.save(shipment)
            for package in packages:
                package.link_to_shipment(shipment.id)
                package.updated_at = now
                await self._package_repo.save(package)

        self._logger.info(
            "Shipment registered",
            extra={
                "shipment_id": shipment.id,
                "provider_shipment_id": shipment.provider_shipment_id,
                "package_count": len(packages),
                "environment": environment,
            },
        )
        return ProviderCallOutcome(
            success=True,
            message="Shipment registered successfully",
            shipment=shipment,
            data=registration.to_payload(),
        )

    async def _load_packages(
        self, package_ids: list[int], user_id: str, environment: str
    ) -> list[Package]:
        packages = await self._package_repo.get_many(package_ids, user_id)
        found = {p.id for p in packages}
        missing = [pid for pid in package_ids if pid not in found]
        if missing:
            raise PackageNotFoundError(missing[0])

        for package in packages:
            if package.environment != environment:
                raise ValidationError(
                    "package_ids",
                    f"Package {package.id} belongs to the {package.environment} environment",
                )
            if not package.is_shippable:
                raise InvalidPackageStatusError(
                    f"Package {package.id} with status '{package.status.value}' cannot be shipped. "
                    "Packages must be accepted or duty paid and screened by SafePackage.",
                    current_status=package.status.value,
                )
        return packages
