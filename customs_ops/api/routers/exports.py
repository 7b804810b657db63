from fastapi import APIRouter, Depends, Response

from customs_ops.api.dependencies import get_use_cases, get_user_id
from customs_ops.application.use_cases.export_documents import ExportFile

router = APIRouter()


def _attachment(export: ExportFile) -> Response:
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@router.get("/exports/shipment-register")
async def export_shipment_register(
    upload_id: int | None = None,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> Response:
    return _attachment(await use_cases["export_shipment_register"].execute(user_id, upload_id=upload_id))


@router.get("/exports/packing-list")
async def export_packing_list(
    upload_id: int | None = None,
    shipment_id: int | None = None,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> Response:
    export = await use_cases["export_packing_list"].execute(user_id, upload_id=upload_id, shipment_id=shipment_id)
    return _attachment(export)


@router.get("/exports/commercial-invoice")
async def export_commercial_invoice(
    upload_id: int | None = None,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> Response:
    return _attachment(await use_cases["export_commercial_invoice"].execute(user_id, upload_id=upload_id))
