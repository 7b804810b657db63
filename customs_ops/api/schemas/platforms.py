from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PlatformResponse(BaseModel):
    id: str
    url: str | None = None
    category: str | None = None


class RemotePlatformsResponse(BaseModel):
    success: bool
    platforms: list[PlatformResponse]
    error: str | None = None


class UserPlatformResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    platform_id: str
    platform_url: str | None = None
    is_enabled: bool
    seller_id: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SaveUserPlatformRequest(BaseModel):
    platform_id: str = Field(min_length=1, max_length=64)
    platform_url: str | None = Field(default=None, max_length=255)
    seller_id: str | None = Field(default=None, max_length=100)
    is_enabled: bool | None = None
    notes: str | None = None


class UpdateUserPlatformRequest(BaseModel):
    """Only the fields sent are changed."""

    platform_url: str | None = Field(default=None, max_length=255)
    seller_id: str | None = Field(default=None, max_length=100)
    is_enabled: bool | None = None
    notes: str | None = None
