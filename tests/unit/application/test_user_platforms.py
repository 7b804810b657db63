import pytest

from customs_ops.application.use_cases.user_platforms import (
    DeleteUserPlatformUseCase,
    ListUserPlatformsUseCase,
    SaveUserPlatformUseCase,
    UpdateUserPlatformUseCase,
)
from customs_ops.domain.errors import UserPlatformNotFoundError, ValidationError
from tests.factories import OTHER_USER_ID, USER_ID


@pytest.fixture
def save_platform(user_platform_repo, tx_manager, clock):
    return SaveUserPlatformUseCase(user_platform_repo=user_platform_repo, transaction_manager=tx_manager, clock=clock)


@pytest.fixture
def update_platform(user_platform_repo, tx_manager, clock):
    return UpdateUserPlatformUseCase(
        user_platform_repo=user_platform_repo, transaction_manager=tx_manager, clock=clock
    )


@pytest.mark.asyncio
async def test_first_save_creates_enabled_platform(save_platform, clock):
    platform, created = await save_platform.execute(USER_ID, "  temu ", seller_id="S-1")

    assert created is True
    assert platform.id is not None
    assert platform.platform_id == "temu"
    assert platform.is_enabled is True
    assert platform.seller_id == "S-1"
    assert platform.created_at == clock.now()


@pytest.mark.asyncio
async def test_second_save_updates_the_same_row(save_platform, user_platform_repo, clock):
    first, _ = await save_platform.execute(USER_ID, "temu", seller_id="S-1", notes="old")
    clock.advance(hours=1)

    second, created = await save_platform.execute(USER_ID, "temu", platform_url="https://temu.com", is_enabled=False)

    assert created is False
    assert second.id == first.id
    assert second.platform_url == "https://temu.com"
    assert second.is_enabled is False
    assert second.seller_id is None
    assert second.notes is None
    assert second.created_at < second.updated_at
    assert len(await user_platform_repo.list_for_user(USER_ID)) == 1


@pytest.mark.asyncio
async def test_save_requires_platform_id(save_platform, user_platform_repo):
    with pytest.raises(ValidationError) as exc_info:
        await save_platform.execute(USER_ID, "   ")

    assert exc_info.value.field == "platform_id"
    assert await user_platform_repo.list_for_user(USER_ID) == []


@pytest.mark.asyncio
async def test_same_platform_for_two_users(save_platform, user_platform_repo):
    await save_platform.execute(USER_ID, "temu")
    _, created = await save_platform.execute(OTHER_USER_ID, "temu")

    assert created is True
    listed = await ListUserPlatformsUseCase(user_platform_repo).execute(OTHER_USER_ID)
    assert [p.user_id for p in listed] == [OTHER_USER_ID]


@pytest.mark.asyncio
async def test_list_is_ordered_by_platform(save_platform, user_platform_repo):
    for platform_id in ("temu", "amazon", "shein"):
        await save_platform.execute(USER_ID, platform_id)

    listed = await ListUserPlatformsUseCase(user_platform_repo).execute(USER_ID)

    assert [p.platform_id for p in listed] == ["amazon", "shein", "temu"]


@pytest.mark.asyncio
async def test_update_touches_only_given_fields(save_platform, update_platform, clock):
    platform, _ = await save_platform.execute(USER_ID, "temu", seller_id="S-1", notes="keep")
    clock.advance(minutes=5)

    updated = await update_platform.execute(platform.id, USER_ID, {"is_enabled": False})

    assert updated.is_enabled is False
    assert updated.seller_id == "S-1"
    assert updated.notes == "keep"
    assert updated.updated_at == clock.now()


@pytest.mark.asyncio
async def test_update_rejects_non_boolean_flag(save_platform, update_platform, user_platform_repo):
    platform, _ = await save_platform.execute(USER_ID, "temu")

    with pytest.raises(ValidationError) as exc_info:
        await update_platform.execute(platform.id, USER_ID, {"is_enabled": None})

    assert exc_info.value.field == "is_enabled"
    assert (await user_platform_repo.get(platform.id, USER_ID)).is_enabled is True


@pytest.mark.asyncio
async def test_update_of_foreign_platform_is_not_found(save_platform, update_platform):
    platform, _ = await save_platform.execute(USER_ID, "temu")

    with pytest.raises(UserPlatformNotFoundError):
        await update_platform.execute(platform.id, OTHER_USER_ID, {"notes": "mine now"})


@pytest.mark.asyncio
async def test_delete(save_platform, user_platform_repo, tx_manager):
    platform, _ = await save_platform.execute(USER_ID, "temu")
    delete = DeleteUserPlatformUseCase(user_platform_repo=user_platform_repo, transaction_manager=tx_manager)

    with pytest.raises(UserPlatformNotFoundError):
        await delete.execute(platform.id, OTHER_USER_ID)

    await delete.execute(platform.id, USER_ID)

    assert await user_platform_repo.get(platform.id, USER_ID) is None
    with pytest.raises(UserPlatformNotFoundError):
        await delete.execute(platform.id, USER_ID)
