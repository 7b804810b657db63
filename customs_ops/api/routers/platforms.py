from fastapi import APIRouter, Depends, Response, status

from customs_ops.api.dependencies import get_use_cases, get_user_id
from customs_ops.api.schemas.platforms import (
    PlatformResponse,
    RemotePlatformsResponse,
    SaveUserPlatformRequest,
    UpdateUserPlatformRequest,
    UserPlatformResponse,
)
from customs_ops.domain.value_objects.environment import Environment

router = APIRouter()


@router.get("/platforms", response_model=list[PlatformResponse])
async def list_platforms(
    category: str | None = None,
    use_cases=Depends(get_use_cases),
) -> list[PlatformResponse]:
    return [
        PlatformResponse(id=platform.id, url=platform.url, category=platform.category)
        for platform in use_cases["list_platforms"].execute(category)
    ]


@router.get("/platforms/remote", response_model=RemotePlatformsResponse)
async def list_remote_platforms(
    response: Response,
    environment: Environment = Environment.SANDBOX,
    use_cases=Depends(get_use_cases),
) -> RemotePlatformsResponse:
    platforms, error = await use_cases["list_remote_platforms"].execute(environment.value)
    if error:
        response.status_code = status.HTTP_502_BAD_GATEWAY
    return RemotePlatformsResponse(
        success=error is None,
        platforms=[PlatformResponse(id=platform.id, url=platform.url) for platform in platforms],
        error=error,
    )


@router.get("/user-platforms", response_model=list[UserPlatformResponse])
async def list_user_platforms(
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> list[UserPlatformResponse]:
    platforms = await use_cases["list_user_platforms"].execute(user_id)
    return [UserPlatformResponse.model_validate(platform) for platform in platforms]


@router.post("/user-platforms", response_model=UserPlatformResponse, status_code=status.HTTP_201_CREATED)
async def save_user_platform(
    payload: SaveUserPlatformRequest,
    response: Response,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> UserPlatformResponse:
    platform, created = await use_cases["save_user_platform"].execute(user_id=user_id, **payload.model_dump())
    if not created:
        response.status_code = status.HTTP_200_OK
    return UserPlatformResponse.model_validate(platform)


@router.patch("/user-platforms/{user_platform_id}", response_model=UserPlatformResponse)
async def update_user_platform(
    user_platform_id: int,
    payload: UpdateUserPlatformRequest,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> UserPlatformResponse:
    changes = payload.model_dump(exclude_unset=True)
    platform = await use_cases["update_user_platform"].execute(user_platform_id, user_id, changes)
    return UserPlatformResponse.model_validate(platform)


@router.delete("/user-platforms/{user_platform_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_platform(
    user_platform_id: int,
    user_id: str = Depends(get_user_id),
    use_cases=Depends(get_use_cases),
) -> Response:
    await use_cases["delete_user_platform"].execute(user_platform_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
