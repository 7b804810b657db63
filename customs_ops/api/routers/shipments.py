from fastapi import APIRouter, Depends, Query, Response, status

from customs_ops.api.dependencies import get_use_cases, get_user_id
from customs_ops.api.routers.packages import to_tracking_response
from customs_ops.api.schemas.packages import PackageResponse, TrackingResponse
from customs_ops.api.schemas.shipments import (
    RegisterShipmentRequest,
    ShipmentCallResponse,
    ShipmentDetailResponse,
    ShipmentListResponse,
    ShipmentResponse,
)
from customs_ops.application.dtos.outcomes import ProviderCallOutcome
from customs_ops.application.use_cases.shipment_queries import MAX_PAGE_SIZE
from customs_ops.domain.value_objects.environment import Environment

router = APIRouter()


def to_call_response(outcome: ProviderCallOutcome) -> ShipmentCallResponse:
    return ShipmentCallResponse(
        success=outcome.success,
        message=outcome.message,
        shipment=ShipmentResponse.model_validate(outcome.shipment) if outcome.shipment else None,
        failure_id=outcome.failure_id,
        data=outcome.data,
    )


@router.post("/shipments", response_model=ShipmentCallResponse, status_code=status.HTTP_201_CREATED)
async def register_shipment(
    payload: RegisterShipmentRequest,
    response: Response,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> ShipmentCallResponse:
    outcome = await use_cases["register_shipment"].execute(
        user_id=user_id,
        environment=payload.environment.value,
        external_id=payload.external_id,
        master_bill=payload.master_bill.model_dump(by_alias=True),
        shipper=payload.shipper,
        consignee=payload.consignee,
        transportation=payload.transportation,
        package_ids=payload.package_ids,
    )
    if not outcome.success:
        response.status_code = status.HTTP_502_BAD_GATEWAY
    return to_call_response(outcome)


@router.get("/shipments", response_model=ShipmentListResponse)
async def list_shipments(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=MAX_PAGE_SIZE),
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> ShipmentListResponse:
    shipments, total = await use_cases["list_shipments"].execute(user_id, page=page, page_size=page_size)
    return ShipmentListResponse(
        shipments=[ShipmentResponse.model_validate(shipment) for shipment in shipments],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/shipments/{shipment_id}", response_model=ShipmentDetailResponse)
async def get_shipment(
    shipment_id: int,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> ShipmentDetailResponse:
    shipment, packages = await use_cases["get_shipment"].execute(shipment_id, user_id)
    detail = ShipmentDetailResponse.model_validate(shipment)
    detail.packages = [PackageResponse.model_validate(package) for package in packages]
    return detail


@router.delete("/shipments/{shipment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shipment(
    shipment_id: int,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> Response:
    await use_cases["delete_shipment"].execute(shipment_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/shipments/{shipment_id}/verify", response_model=ShipmentCallResponse)
async def verify_shipment(
    shipment_id: int,
    response: Response,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> ShipmentCallResponse:
    outcome = await use_cases["verify_shipment"].execute(shipment_id, user_id)
    if not outcome.success:
        response.status_code = status.HTTP_502_BAD_GATEWAY
    return to_call_response(outcome)


@router.get("/shipments/{shipment_id}/document")
async def get_shipment_document(
    shipment_id: int,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> Response:
    document = await use_cases["get_shipment_document"].execute(shipment_id, user_id)
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )


@router.get("/shipments/{shipment_id}/tracking", response_model=TrackingResponse)
async def shipment_tracking(
    shipment_id: int,
    environment: Environment | None = None,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> TrackingResponse:
    view = await use_cases["get_tracking"].for_shipment(
        shipment_id, user_id, environment=environment.value if environment else None
    )
    return to_tracking_response(view)
