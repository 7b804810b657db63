import pytest

from customs_ops.application.interfaces.failure_repo import FailureFilters
from customs_ops.application.interfaces.screening_gateway import ProviderResult
from customs_ops.application.use_cases.create_upload import CreateUploadUseCase, validate_rows
from customs_ops.application.use_cases.process_upload import ProcessUploadUseCase
from customs_ops.domain.entities.failure_record import RetryStatus
from customs_ops.domain.entities.upload import UploadStatus
from customs_ops.domain.errors import InvalidUploadStatusError, ValidationError
from customs_ops.domain.value_objects.provider_endpoint import ProviderEndpoint
from tests.factories import USER_ID, screening_row


@pytest.fixture
def create_upload(upload_repo, tx_manager, clock):
    return CreateUploadUseCase(upload_repo=upload_repo, transaction_manager=tx_manager, clock=clock)


@pytest.fixture
def process_upload(upload_repo, package_repo, failure_log, gateway_selector, tx_manager, clock):
    return ProcessUploadUseCase(
        upload_repo=upload_repo,
        package_repo=package_repo,
        failure_log=failure_log,
        gateway_selector=gateway_selector,
        transaction_manager=tx_manager,
        clock=clock,
    )


def test_validate_rows_reports_row_and_field():
    bad = screening_row("EXT-2")
    del bad["barcode"]

    errors = validate_rows([screening_row("EXT-1"), bad])

    assert errors == [
        {"row": 2, "external_id": "EXT-2", "field": "barcode", "message": "Field required"}
    ]


@pytest.mark.asyncio
async def test_create_upload_validates_rows(create_upload):
    upload = await create_upload.execute(USER_ID, "batch.csv", "sandbox", [screening_row("EXT-1")])

    assert upload.id is not None
    assert upload.status == UploadStatus.VALIDATED
    assert upload.total_rows == 1


@pytest.mark.asyncio
async def test_create_upload_with_invalid_rows(create_upload):
    upload = await create_upload.execute(
        USER_ID, "batch.csv", "sandbox", [screening_row("EXT-1", weight={"value": 0, "unit": "K"})]
    )

    assert upload.status == UploadStatus.VALIDATION_FAILED
    assert upload.validation_errors[0]["field"] == "weight.value"


@pytest.mark.asyncio
async def test_create_upload_requires_rows(create_upload):
    with pytest.raises(ValidationError):
        await create_upload.execute(USER_ID, "empty.csv", "sandbox", [])


@pytest.mark.asyncio
async def test_process_upload_counts_outcomes_and_records_failures(
    create_upload, process_upload, package_repo, failure_repo, gateway
):
    rows = [screening_row(f"EXT-{n}") for n in range(1, 5)]
    upload = await create_upload.execute(USER_ID, "batch.csv", "sandbox", rows)
    gateway.queue(
        "screen_package",
        ProviderResult.ok({"packageId": "SP-1", "code": 1, "status": "accepted"}),
        ProviderResult.ok({"packageId": "SP-2", "code": 4, "status": "audit"}),
        ProviderResult.failed("503", "Service unavailable", http_status=503),
        ProviderResult.ok({"packageId": "SP-4", "code": 2, "status": "rejected"}),
    )

    upload = await process_upload.execute(upload.id, USER_ID)

    assert upload.status == UploadStatus.COMPLETED_WITH_ERRORS
    assert upload.processing_results == {
        "total": 4,
        "processed": 4,
        "accepted": 1,
        "rejected": 1,
        "inconclusive": 0,
        "audit_required": 1,
        "failed": 1,
    }
    assert upload.processing_completed_at is not None

    _, total = await package_repo.list(USER_ID, upload_id=upload.id)
    assert total == 3

    [record], _ = await failure_repo.list(USER_ID, FailureFilters())
    assert record.endpoint == ProviderEndpoint.PACKAGE_SCREEN.value
    assert record.upload_id == upload.id
    assert record.row_number == 3
    assert record.external_id == "EXT-3"
    assert record.max_retries == 3
    assert record.retry_status == RetryStatus.PENDING
    assert record.request_body == rows[2]


@pytest.mark.asyncio
async def test_process_upload_without_failures_completes(create_upload, process_upload):
    upload = await create_upload.execute(USER_ID, "batch.csv", "sandbox", [screening_row("EXT-1")])

    upload = await process_upload.execute(upload.id, USER_ID)

    assert upload.status == UploadStatus.COMPLETED


@pytest.mark.asyncio
async def test_process_requires_validated_upload(create_upload, process_upload, gateway):
    bad = screening_row("EXT-1")
    del bad["products"]
    upload = await create_upload.execute(USER_ID, "batch.csv", "sandbox", [bad])

    with pytest.raises(InvalidUploadStatusError):
        await process_upload.execute(upload.id, USER_ID)
    assert gateway.calls == []
