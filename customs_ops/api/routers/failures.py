from fastapi import APIRouter, Depends, Query, Response, status

from customs_ops.api.dependencies import get_use_cases, get_user_id
from customs_ops.api.schemas.failures import (
    BatchRetryItemResponse,
    BatchRetryRequest,
    BatchRetryResponse,
    BatchRetrySummary,
    FailureListResponse,
    FailureResponse,
    FailureStatsResponse,
    ResolveFailureRequest,
    RetryResponse,
)
from customs_ops.api.schemas.packages import PackageResponse
from customs_ops.application.interfaces.failure_repo import FailureFilters
from customs_ops.domain.entities.failure_record import RetryStatus
from customs_ops.domain.value_objects.environment import Environment

router = APIRouter()


@router.get("/failures", response_model=FailureListResponse)
async def list_failures(
    retry_status: RetryStatus | None = Query(default=None, alias="status"),
    environment: Environment | None = None,
    upload_id: int | None = None,
    package_id: int | None = None,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> FailureListResponse:
    filters = FailureFilters(
        status=retry_status.value if retry_status else None,
        environment=environment.value if environment else None,
        upload_id=upload_id,
        package_id=package_id,
    )
    records, total = await use_cases["list_failures"].execute(
        user_id, filters, limit=limit, offset=offset
    )
    return FailureListResponse(
        failures=[FailureResponse.model_validate(record) for record in records],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/failures/stats", response_model=FailureStatsResponse)
async def failure_stats(
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> FailureStatsResponse:
    return FailureStatsResponse(**await use_cases["failure_stats"].execute(user_id))


@router.post("/failures/batch-retry", response_model=BatchRetryResponse)
async def batch_retry(
    payload: BatchRetryRequest,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> BatchRetryResponse:
    report = await use_cases["batch_retry"].execute(
        user_id, failure_ids=payload.failure_ids, upload_id=payload.upload_id
    )
    return BatchRetryResponse(
        summary=BatchRetrySummary(total=report.total, successful=report.successful, failed=report.failed),
        results=[BatchRetryItemResponse.model_validate(item) for item in report.results],
        message=report.message,
    )


@router.get("/failures/{failure_id}", response_model=FailureResponse)
async def get_failure(
    failure_id: int,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> FailureResponse:
    record = await use_cases["get_failure"].execute(failure_id, user_id)
    return FailureResponse.model_validate(record)


@router.post("/failures/{failure_id}/retry", response_model=RetryResponse)
async def retry_failure(
    failure_id: int,
    response: Response,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> RetryResponse:
    outcome = await use_cases["retry_failure"].execute(failure_id, user_id)
    if outcome.rejected:
        # Guard transitions are persisted; the call itself is refused
        response.status_code = status.HTTP_400_BAD_REQUEST
    return RetryResponse(
        success=outcome.success,
        message=outcome.message,
        retry_status=outcome.retry_status.value,
        retry_count=outcome.retry_count,
        next_retry_at=outcome.next_retry_at,
        package=PackageResponse.model_validate(outcome.package) if outcome.package else None,
        error=None if outcome.success else outcome.message,
    )


@router.post(
    "/failures/{failure_id}/resolve",
    response_model=FailureResponse,
    status_code=status.HTTP_200_OK,
)
async def resolve_failure(
    failure_id: int,
    payload: ResolveFailureRequest | None = None,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> FailureResponse:
    notes = payload.notes if payload else None
    record = await use_cases["resolve_failure"].execute(failure_id, user_id, notes=notes)
    return FailureResponse.model_validate(record)
