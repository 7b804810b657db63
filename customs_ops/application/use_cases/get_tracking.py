import logging

from customs_ops.application.dtos.outcomes import TrackingView
from customs_ops.application.dtos.provider import TrackingResult
from customs_ops.application.interfaces.clock import Clock
from customs_ops.application.interfaces.package_repo import PackageRepo
from customs_ops.application.interfaces.screening_gateway import ScreeningGatewaySelector
from customs_ops.application.interfaces.shipment_repo import ShipmentRepo
from customs_ops.application.interfaces.tracking_event_repo import TrackingEventRepo
from customs_ops.application.interfaces.transaction_manager import TransactionManager
from customs_ops.application.provider_errors import (
    describe_provider_error,
    guarded_call,
    parse_provider_data,
)
from customs_ops.domain.entities.tracking_event import TrackedEntity, TrackingEvent
from customs_ops.domain.errors import (
    MissingProviderIdError,
    PackageNotFoundError,
    ShipmentNotFoundError,
)


class GetTrackingUseCase:
    """
    Fetches tracking events for a package or shipment and stores them.

    Ingestion is idempotent on the event's natural key. When the provider
    call fails the cached events are returned together with the error.
    """

    def __init__(
        self,
        package_repo: PackageRepo,
        shipment_repo: ShipmentRepo,
        tracking_event_repo: TrackingEventRepo,
        gateway_selector: ScreeningGatewaySelector,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._package_repo = package_repo
        self._shipment_repo = shipment_repo
        self._tracking_event_repo = tracking_event_repo
        self._gateway_selector = gateway_selector
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def for_package(self, package_id: int, user_id: str, environment: str | None = None) -> TrackingView:
        package = await self._package_repo.get(package_id, user_id)
        if not package:
            raise PackageNotFoundError(package_id)
        if not package.provider_package_id:
            raise MissingProviderIdError("Package has no SafePackage ID - cannot fetch tracking")
        environment = environment or package.environment
        gateway = self._gateway_selector.for_environment(environment)
        return await self._fetch(
            TrackedEntity.PACKAGE,
            package.id,
            package.provider_package_id,
            user_id,
            environment,
            gateway.get_package_tracking(package.provider_package_id),
        )

    async def for_shipment(self, shipment_id: int, user_id: str, environment: str | None = None) -> TrackingView:
        shipment = await self._shipment_repo.get(shipment_id, user_id)
        if not shipment:
            raise ShipmentNotFoundError(shipment_id)
        if not shipment.provider_shipment_id:
            raise MissingProviderIdError("Shipment has not been registered with SafePackage")
        environment = environment or shipment.environment
        gateway = self._gateway_selector.for_environment(environment)
        return await self._fetch(
            TrackedEntity.SHIPMENT,
            shipment.id,
            shipment.provider_shipment_id,
            user_id,
            environment,
            gateway.get_shipment_tracking(shipment.provider_shipment_id),
        )

    async def _fetch(self, entity_type, entity_id, provider_id, user_id, environment, call) -> TrackingView:
        result = await guarded_call(call, operation="get_tracking", entity_type=entity_type.value, entity_id=entity_id)
        tracking, result = parse_provider_data(result, TrackingResult)

        if tracking is None:
            api_error = describe_provider_error(result.error)
            self._logger.warning(
                "Tracking fetch failed, serving cached events",
                extra={"entity_type": entity_type.value, "entity_id": entity_id, "api_error": api_error},
            )
            cached = await self._tracking_event_repo.list_for_entity(entity_type.value, entity_id)
            return TrackingView(provider_id=provider_id, events=cached, source="cache", api_error=api_error)

        now = self._clock.now()
        events = [
            TrackingEvent(
                user_id=user_id,
                entity_type=entity_type,
                entity_id=entity_id,
                provider_entity_id=provider_id,
                event_type=event.type,
                event_description=event.description,
                event_time=event.time,
                event_data=event.data,
                environment=getattr(environment, "value", environment),
                fetched_at=now,
            )
            for event in tracking.events
        ]
        async with self._transaction_manager.start():
            inserted = await self._tracking_event_repo.upsert_many(events)
            stored = await self._tracking_event_repo.list_for_entity(entity_type.value, entity_id)

        self._logger.info(
            "Tracking events ingested",
            extra={
                "entity_type": entity_type.value,
                "entity_id": entity_id,
                "received": len(events),
                "inserted": inserted,
            },
        )
        return TrackingView(provider_id=provider_id, events=stored, source="api")
