import logging
from typing import Any

from customs_ops.application.interfaces.clock import Clock
from customs_ops.application.interfaces.transaction_manager import TransactionManager
from customs_ops.application.interfaces.user_platform_repo import UserPlatformRepo
from customs_ops.domain.entities.user_platform import UserPlatform
from customs_ops.domain.errors import UserPlatformNotFoundError

logger = logging.getLogger(__name__)


class ListUserPlatformsUseCase:
    def __init__(self, user_platform_repo: UserPlatformRepo) -> None:
        self._user_platform_repo = user_platform_repo

    async def execute(self, user_id: str) -> list[UserPlatform]:
        return await self._user_platform_repo.list_for_user(user_id)


class SaveUserPlatformUseCase:
    """
    Create or update the caller's settings for one platform.

    A second save for the same platform_id updates the existing row, so a
    user never holds two rows for one platform. Returns the row and whether
    it was created.
    """

    def __init__(
        self,
        user_platform_repo: UserPlatformRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._user_platform_repo = user_platform_repo
        self._transaction_manager = transaction_manager
        self._clock = clock

    async def execute(
        self,
        user_id: str,
        platform_id: str,
        platform_url: str | None = None,
        seller_id: str | None = None,
        is_enabled: bool | None = None,
        notes: str | None = None,
    ) -> tuple[UserPlatform, bool]:
        now = self._clock.now()
        candidate = UserPlatform.create(
            user_id=user_id,
            platform_id=platform_id,
            now=now,
            platform_url=platform_url,
            seller_id=seller_id,
            is_enabled=is_enabled,
            notes=notes,
        )

        async with self._transaction_manager.start():
            existing = await self._user_platform_repo.get_by_platform(user_id, candidate.platform_id)
            if existing is None:
                platform = await self._user_platform_repo.add(candidate)
                logger.info(
                    "User platform created",
                    extra={"user_platform_id": platform.id, "platform_id": platform.platform_id},
                )
                return platform, True

            # Omitted optional fields are cleared, matching a full replace
            existing.apply_changes(
                {
                    "platform_url": candidate.platform_url,
                    "seller_id": candidate.seller_id,
                    "is_enabled": candidate.is_enabled,
                    "notes": candidate.notes,
                },
                now,
            )
            await self._user_platform_repo.save(existing)
            return existing, False


class UpdateUserPlatformUseCase:
    """Partial update: only keys present in `changes` are touched."""

    def __init__(
        self,
        user_platform_repo: UserPlatformRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._user_platform_repo = user_platform_repo
        self._transaction_manager = transaction_manager
        self._clock = clock

    async def execute(self, user_platform_id: int, user_id: str, changes: dict[str, Any]) -> UserPlatform:
        async with self._transaction_manager.start():
            platform = await self._user_platform_repo.get(user_platform_id, user_id)
            if not platform:
                raise UserPlatformNotFoundError(user_platform_id)
            platform.apply_changes(changes, self._clock.now())
            await self._user_platform_repo.save(platform)
        return platform


class DeleteUserPlatformUseCase:
    def __init__(self, user_platform_repo: UserPlatformRepo, transaction_manager: TransactionManager) -> None:
        self._user_platform_repo = user_platform_repo
        self._transaction_manager = transaction_manager

    async def execute(self, user_platform_id: int, user_id: str) -> None:
        async with self._transaction_manager.start():
            deleted = await self._user_platform_repo.delete(user_platform_id, user_id)
        if not deleted:
            raise UserPlatformNotFoundError(user_platform_id)
