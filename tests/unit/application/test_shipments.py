import base64

import pytest

from customs_ops.application.interfaces.screening_gateway import ProviderResult
from customs_ops.application.use_cases.register_shipment import RegisterShipmentUseCase
from customs_ops.application.use_cases.shipment_queries import (
    DeleteShipmentUseCase,
    GetShipmentDocumentUseCase,
    ListShipmentsUseCase,
)
from customs_ops.application.use_cases.verify_shipment import VerifyShipmentUseCase
from customs_ops.domain.entities.failure_record import RetryStatus
from customs_ops.domain.entities.package import Package, PackageStatus
from customs_ops.domain.entities.shipment import DocumentType, Shipment, ShipmentStatus
from customs_ops.domain.errors import (
    DocumentNotFoundError,
    InvalidPackageStatusError,
    InvalidShipmentStatusError,
    MissingProviderIdError,
    PackageNotFoundError,
    ValidationError,
)
from customs_ops.domain.value_objects.provider_endpoint import ProviderEndpoint
from tests.factories import OTHER_USER_ID, USER_ID

PARTIES = dict(
    shipper={"name": "Shenzhen Widgets"},
    consignee={"name": "Austin Imports"},
    transportation={"mode": "air", "carrier": "XX"},
)


@pytest.fixture
def register(shipment_repo, package_repo, failure_log, gateway_selector, tx_manager, clock):
    return RegisterShipmentUseCase(
        shipment_repo=shipment_repo,
        package_repo=package_repo,
        failure_log=failure_log,
        gateway_selector=gateway_selector,
        transaction_manager=tx_manager,
        clock=clock,
    )


@pytest.fixture
def verify(shipment_repo, failure_log, gateway_selector, tx_manager, clock):
    return VerifyShipmentUseCase(
        shipment_repo=shipment_repo,
        failure_log=failure_log,
        gateway_selector=gateway_selector,
        transaction_manager=tx_manager,
        clock=clock,
    )


async def _accepted(package_repo, n, **overrides):
    params = dict(
        user_id=USER_ID,
        external_id=f"EXT-{n}",
        provider_package_id=f"SP-{n}",
        status=PackageStatus.ACCEPTED,
    )
    params.update(overrides)
    return await package_repo.add(Package(**params))


async def _registered(shipment_repo, **overrides):
    params = dict(
        user_id=USER_ID,
        external_id="SHIP-1",
        master_bill_prefix="123",
        master_bill_serial="45678901",
        provider_shipment_id="SH-1",
        status=ShipmentStatus.REGISTERED,
    )
    params.update(overrides)
    return await shipment_repo.add(Shipment(**params))


@pytest.mark.asyncio
async def test_register_links_packages(register, package_repo, gateway):
    first = await _accepted(package_repo, 1)
    second = await _accepted(package_repo, 2, status=PackageStatus.DUTY_PAID)

    outcome = await register.execute(
        user_id=USER_ID,
        environment="sandbox",
        external_id="SHIP-1",
        master_bill={"prefix": "123", "serialNumber": "45678901"},
        package_ids=[first.id, second.id],
        **PARTIES,
    )

    assert outcome.success is True
    shipment = outcome.shipment
    assert shipment.status == ShipmentStatus.REGISTERED
    assert shipment.provider_shipment_id.startswith("SH-")
    assert shipment.registered_at is not None
    assert shipment.master_bill_number == "123-45678901"
    assert gateway.calls_to("register_shipment")[0]["packageIds"] == ["SP-1", "SP-2"]

    for package_id in (first.id, second.id):
        package = await package_repo.get(package_id, USER_ID)
        assert package.shipment_id == shipment.id
        assert package.status == PackageStatus.REGISTERED


@pytest.mark.asyncio
async def test_register_failure_marks_shipment_failed(register, package_repo, failure_repo, gateway):
    package = await _accepted(package_repo, 1)
    gateway.queue("register_shipment", ProviderResult.failed("422", "Invalid master bill", http_status=422))

    outcome = await register.execute(
        user_id=USER_ID,
        environment="sandbox",
        external_id="SHIP-1",
        master_bill={"prefix": "123", "serialNumber": "45678901"},
        package_ids=[package.id],
        **PARTIES,
    )

    assert outcome.success is False
    assert outcome.shipment.status == ShipmentStatus.FAILED
    record = await failure_repo.get(outcome.failure_id, USER_ID)
    assert record.endpoint == ProviderEndpoint.SHIPMENT_REGISTER.value
    assert record.retry_status == RetryStatus.MANUAL_REQUIRED
    assert record.max_retries == 1
    assert record.shipment_id == outcome.shipment.id
    stored = await package_repo.get(package.id, USER_ID)
    assert stored.shipment_id is None
    assert stored.status == PackageStatus.ACCEPTED


@pytest.mark.asyncio
async def test_register_validates_packages(register, package_repo, gateway):
    rejected = await _accepted(package_repo, 1, status=PackageStatus.REJECTED)
    unscreened = await _accepted(package_repo, 2, provider_package_id=None)
    production = await _accepted(package_repo, 3, environment="production")
    foreign = await _accepted(package_repo, 4, user_id=OTHER_USER_ID)
    base = dict(
        user_id=USER_ID,
        environment="sandbox",
        external_id="SHIP-1",
        master_bill={"prefix": "123", "serialNumber": "45678901"},
        **PARTIES,
    )

    with pytest.raises(InvalidPackageStatusError):
        await register.execute(package_ids=[rejected.id], **base)
    with pytest.raises(InvalidPackageStatusError):
        await register.execute(package_ids=[unscreened.id], **base)
    with pytest.raises(ValidationError):
        await register.execute(package_ids=[production.id], **base)
    with pytest.raises(PackageNotFoundError):
        await register.execute(package_ids=[foreign.id], **base)
    with pytest.raises(ValidationError):
        await register.execute(package_ids=[], **base)
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_register_validates_master_bill(register, package_repo, shipment_repo):
    package = await _accepted(package_repo, 1)

    with pytest.raises(ValidationError, match="prefix"):
        await register.execute(
            user_id=USER_ID,
            environment="sandbox",
            external_id="SHIP-1",
            master_bill={"prefix": "12345", "serialNumber": "45678901"},
            package_ids=[package.id],
            **PARTIES,
        )
    _, total = await shipment_repo.list(USER_ID)
    assert total == 0


@pytest.mark.asyncio
async def test_verify_accepts_and_stores_document(verify, shipment_repo):
    shipment = await _registered(shipment_repo)

    outcome = await verify.execute(shipment.id, USER_ID)

    assert outcome.success is True
    stored = await shipment_repo.get(shipment.id, USER_ID)
    assert stored.status == ShipmentStatus.VERIFIED
    assert stored.verification_document_type == DocumentType.PNG
    assert stored.verification_document == "iVBORw0KGgo="
    assert stored.verified_at is not None


@pytest.mark.asyncio
async def test_verify_rejection_stores_reason(verify, shipment_repo, gateway):
    shipment = await _registered(shipment_repo)
    gateway.queue(
        "verify_shipment",
        ProviderResult.ok({"code": 2, "status": "rejected", "reason": {"code": "R12", "description": "Bad manifest"}}),
    )

    outcome = await verify.execute(shipment.id, USER_ID)

    assert outcome.success is True
    stored = await shipment_repo.get(shipment.id, USER_ID)
    assert stored.status == ShipmentStatus.REJECTED
    assert stored.verification_reason_code == "R12"
    assert stored.verification_reason_description == "Bad manifest"


@pytest.mark.asyncio
async def test_verify_failure_records_manual_failure(verify, shipment_repo, failure_repo, gateway):
    shipment = await _registered(shipment_repo)
    gateway.queue("verify_shipment", ProviderResult.failed("TIMEOUT", "Request timed out"))

    outcome = await verify.execute(shipment.id, USER_ID)

    assert outcome.success is False
    stored = await shipment_repo.get(shipment.id, USER_ID)
    assert stored.status == ShipmentStatus.FAILED
    record = await failure_repo.get(outcome.failure_id, USER_ID)
    assert record.endpoint == ProviderEndpoint.SHIPMENT_VERIFY.value
    assert record.request_body == {"shipmentId": "SH-1"}
    assert record.retry_status == RetryStatus.MANUAL_REQUIRED


@pytest.mark.asyncio
async def test_verify_is_a_noop_once_verified(verify, shipment_repo, gateway):
    shipment = await _registered(shipment_repo, status=ShipmentStatus.VERIFIED)

    outcome = await verify.execute(shipment.id, USER_ID)

    assert outcome.success is True
    assert outcome.message == "Shipment already verified"
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_verify_requires_provider_id(verify, shipment_repo):
    shipment = await _registered(shipment_repo, provider_shipment_id=None, status=ShipmentStatus.PENDING)

    with pytest.raises(MissingProviderIdError):
        await verify.execute(shipment.id, USER_ID)


@pytest.mark.asyncio
async def test_document_is_decoded_with_media_type(shipment_repo):
    content = b"\x00webm-bytes"
    shipment = await _registered(
        shipment_repo,
        status=ShipmentStatus.VERIFIED,
        verification_document_type=DocumentType.WEBM,
        verification_document=base64.b64encode(content).decode(),
    )

    document = await GetShipmentDocumentUseCase(shipment_repo).execute(shipment.id, USER_ID)

    assert document.content == content
    assert document.media_type == "video/webm"
    assert document.filename == "cbp-document-SHIP-1.webm"


@pytest.mark.asyncio
async def test_missing_document_is_not_found(shipment_repo):
    shipment = await _registered(shipment_repo)

    with pytest.raises(DocumentNotFoundError):
        await GetShipmentDocumentUseCase(shipment_repo).execute(shipment.id, USER_ID)


@pytest.mark.asyncio
async def test_only_pending_shipments_can_be_deleted(shipment_repo, package_repo, tx_manager):
    use_case = DeleteShipmentUseCase(shipment_repo=shipment_repo, package_repo=package_repo, transaction_manager=tx_manager)
    registered = await _registered(shipment_repo)
    pending = await _registered(shipment_repo, status=ShipmentStatus.PENDING, provider_shipment_id=None)

    with pytest.raises(InvalidShipmentStatusError):
        await use_case.execute(registered.id, USER_ID)

    await use_case.execute(pending.id, USER_ID)
    assert await shipment_repo.get(pending.id, USER_ID) is None


@pytest.mark.asyncio
async def test_list_shipments_clamps_page_size(shipment_repo):
    for n in range(3):
        await _registered(shipment_repo, external_id=f"SHIP-{n}")

    shipments, total = await ListShipmentsUseCase(shipment_repo).execute(USER_ID, page=1, page_size=500)

    assert total == 3
    assert len(shipments) == 3
