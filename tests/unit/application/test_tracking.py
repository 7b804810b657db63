from datetime import datetime, timezone

import pytest

from customs_ops.application.interfaces.screening_gateway import ProviderResult
from customs_ops.application.use_cases.get_tracking import GetTrackingUseCase
from customs_ops.domain.entities.package import Package, PackageStatus
from customs_ops.domain.entities.shipment import Shipment, ShipmentStatus
from customs_ops.domain.errors import MissingProviderIdError
from tests.factories import USER_ID

EVENTS = {
    "events": [
        {"type": "screened", "description": "Package screened", "time": "2026-01-15T10:00:00Z"},
        {"type": "in_transit", "description": "Departed origin", "time": "2026-01-16T08:30:00Z"},
    ]
}


@pytest.fixture
def tracking(package_repo, shipment_repo, tracking_event_repo, gateway_selector, tx_manager, clock):
    return GetTrackingUseCase(
        package_repo=package_repo,
        shipment_repo=shipment_repo,
        tracking_event_repo=tracking_event_repo,
        gateway_selector=gateway_selector,
        transaction_manager=tx_manager,
        clock=clock,
    )


async def _package(package_repo, **overrides):
    params = dict(user_id=USER_ID, external_id="EXT-1", provider_package_id="SP-1", status=PackageStatus.ACCEPTED)
    params.update(overrides)
    return await package_repo.add(Package(**params))


@pytest.mark.asyncio
async def test_events_are_stored_newest_first(tracking, package_repo, gateway):
    package = await _package(package_repo)
    gateway.queue("get_package_tracking", ProviderResult.ok(EVENTS))

    view = await tracking.for_package(package.id, USER_ID)

    assert view.source == "api"
    assert view.provider_id == "SP-1"
    assert [event.event_type for event in view.events] == ["in_transit", "screened"]
    assert view.events[0].event_time == datetime(2026, 1, 16, 8, 30, tzinfo=timezone.utc)
    assert gateway.calls_to("get_package_tracking") == ["SP-1"]


@pytest.mark.asyncio
async def test_refetching_does_not_duplicate_events(tracking, package_repo, gateway):
    package = await _package(package_repo)
    gateway.queue("get_package_tracking", ProviderResult.ok(EVENTS), ProviderResult.ok(EVENTS))

    await tracking.for_package(package.id, USER_ID)
    view = await tracking.for_package(package.id, USER_ID)

    assert len(view.events) == 2


@pytest.mark.asyncio
async def test_provider_failure_serves_cache(tracking, package_repo, gateway):
    package = await _package(package_repo)
    gateway.queue(
        "get_package_tracking",
        ProviderResult.ok(EVENTS),
        ProviderResult.failed("503", "Service unavailable", http_status=503),
    )
    await tracking.for_package(package.id, USER_ID)

    view = await tracking.for_package(package.id, USER_ID)

    assert view.source == "cache"
    assert view.api_error == "Service unavailable"
    assert len(view.events) == 2


@pytest.mark.asyncio
async def test_tracking_requires_provider_id(tracking, package_repo, gateway):
    package = await _package(package_repo, provider_package_id=None)

    with pytest.raises(MissingProviderIdError):
        await tracking.for_package(package.id, USER_ID)
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_environment_override_selects_gateway(tracking, package_repo, gateway, production_gateway):
    package = await _package(package_repo)

    await tracking.for_package(package.id, USER_ID, environment="production")

    assert gateway.calls == []
    assert production_gateway.calls_to("get_package_tracking") == ["SP-1"]


@pytest.mark.asyncio
async def test_shipment_tracking(tracking, shipment_repo, gateway):
    shipment = await shipment_repo.add(
        Shipment(
            user_id=USER_ID,
            external_id="SHIP-1",
            master_bill_prefix="123",
            master_bill_serial="4567",
            provider_shipment_id="SH-1",
            status=ShipmentStatus.REGISTERED,
        )
    )

    view = await tracking.for_shipment(shipment.id, USER_ID)

    assert view.source == "api"
    assert view.events[0].entity_type.value == "shipment"
    assert gateway.calls_to("get_shipment_tracking") == ["SH-1"]
