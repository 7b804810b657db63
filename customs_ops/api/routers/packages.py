from fastapi import APIRouter, Depends, Query, Response, status

from customs_ops.api.dependencies import get_use_cases, get_user_id
from customs_ops.api.schemas.packages import (
    AuditSubmissionRequest,
    PackageDetailResponse,
    PackageListResponse,
    PackageResponse,
    ProviderCallResponse,
    ResubmitRequest,
    TrackingEventResponse,
    TrackingResponse,
)
from customs_ops.application.dtos.outcomes import ProviderCallOutcome, TrackingView
from customs_ops.domain.entities.package import PackageStatus
from customs_ops.domain.value_objects.environment import Environment

router = APIRouter()


def to_call_response(outcome: ProviderCallOutcome) -> ProviderCallResponse:
    return ProviderCallResponse(
        success=outcome.success,
        message=outcome.message,
        package=PackageResponse.model_validate(outcome.package) if outcome.package else None,
        failure_id=outcome.failure_id,
        data=outcome.data,
    )


def to_tracking_response(view: TrackingView) -> TrackingResponse:
    return TrackingResponse(
        success=view.api_error is None,
        provider_id=view.provider_id,
        events=[TrackingEventResponse.model_validate(event) for event in view.events],
        source=view.source,
        api_error=view.api_error,
    )


@router.get("/packages", response_model=PackageListResponse)
async def list_packages(
    package_status: PackageStatus | None = Query(default=None, alias="status"),
    upload_id: int | None = None,
    shipment_id: int | None = None,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> PackageListResponse:
    packages, total = await use_cases["list_packages"].execute(
        user_id,
        status=package_status.value if package_status else None,
        upload_id=upload_id,
        shipment_id=shipment_id,
        limit=limit,
        offset=offset,
    )
    return PackageListResponse(
        packages=[PackageResponse.model_validate(package) for package in packages],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/packages/{package_id}", response_model=PackageDetailResponse)
async def get_package(
    package_id: int,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> PackageDetailResponse:
    package = await use_cases["get_package"].execute(package_id, user_id)
    return PackageDetailResponse.model_validate(package)


@router.post("/packages/{package_id}/duty", response_model=ProviderCallResponse)
async def pay_duty(
    package_id: int,
    response: Response,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> ProviderCallResponse:
    outcome = await use_cases["pay_duty"].execute(package_id, user_id)
    if not outcome.success:
        response.status_code = status.HTTP_502_BAD_GATEWAY
    return to_call_response(outcome)


@router.post("/packages/{package_id}/audit", response_model=ProviderCallResponse)
async def submit_audit(
    package_id: int,
    payload: AuditSubmissionRequest,
    response: Response,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> ProviderCallResponse:
    outcome = await use_cases["submit_audit"].execute(
        package_id, user_id, images=payload.images, remark=payload.remark
    )
    if not outcome.success:
        response.status_code = status.HTTP_502_BAD_GATEWAY
    return to_call_response(outcome)


@router.post("/packages/{package_id}/resubmit", response_model=ProviderCallResponse)
async def resubmit_package(
    package_id: int,
    payload: ResubmitRequest,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> ProviderCallResponse:
    # A failed re-screen is queued for retry, so it is not a gateway error
    outcome = await use_cases["resubmit_package"].execute(
        package_id, user_id, corrections=payload.corrections, notes=payload.notes
    )
    return to_call_response(outcome)


@router.get("/packages/{package_id}/tracking", response_model=TrackingResponse)
async def package_tracking(
    package_id: int,
    environment: Environment | None = None,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> TrackingResponse:
    view = await use_cases["get_tracking"].for_package(
        package_id, user_id, environment=environment.value if environment else None
    )
    return to_tracking_response(view)
