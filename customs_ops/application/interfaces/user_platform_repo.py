from customs_ops.domain.entities.user_platform import UserPlatform


class UserPlatformRepo:
    async def add(self, platform: UserPlatform) -> UserPlatform:
        raise NotImplementedError

    async def get(self, user_platform_id: int, user_id: str) -> UserPlatform | None:
        raise NotImplementedError

    async def get_by_platform(self, user_id: str, platform_id: str) -> UserPlatform | None:
        raise NotImplementedError

    async def list_for_user(self, user_id: str) -> list[UserPlatform]:
        """Ordered by platform_id."""
        raise NotImplementedError

    async def save(self, platform: UserPlatform) -> None:
        raise NotImplementedError

    async def delete(self, user_platform_id: int, user_id: str) -> bool:
        raise NotImplementedError
