from fastapi import APIRouter, Depends, status

from customs_ops.api.dependencies import get_use_cases, get_user_id
from customs_ops.api.schemas.uploads import CreateUploadRequest, UploadResponse

router = APIRouter()


@router.post("/uploads", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def create_upload(
    payload: CreateUploadRequest,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> UploadResponse:
    upload = await use_cases["create_upload"].execute(
        user_id=user_id,
        filename=payload.filename,
        environment=payload.environment.value,
        rows=payload.rows,
    )
    return UploadResponse.model_validate(upload)


@router.get("/uploads/{upload_id}", response_model=UploadResponse)
async def get_upload(
    upload_id: int,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> UploadResponse:
    upload = await use_cases["get_upload"].execute(upload_id, user_id)
    return UploadResponse.model_validate(upload)


@router.post("/uploads/{upload_id}/process", response_model=UploadResponse)
async def process_upload(
    upload_id: int,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> UploadResponse:
    upload = await use_cases["process_upload"].execute(upload_id, user_id)
    return UploadResponse.model_validate(upload)
