import copy

from customs_ops.application.interfaces.user_platform_repo import UserPlatformRepo
from customs_ops.domain.entities.user_platform import UserPlatform


class InMemoryUserPlatformRepo(UserPlatformRepo):
    def __init__(self) -> None:
        self._platforms: dict[int, UserPlatform] = {}
        self._next_id = 1

    async def add(self, platform: UserPlatform) -> UserPlatform:
        if await self.get_by_platform(platform.user_id, platform.platform_id):
            raise ValueError(f"Duplicate platform '{platform.platform_id}' for user")
        platform.id = self._next_id
        self._platforms[self._next_id] = copy.deepcopy(platform)
        self._next_id += 1
        return platform

    async def get(self, user_platform_id: int, user_id: str) -> UserPlatform | None:
        platform = self._platforms.get(user_platform_id)
        if not platform or platform.user_id != user_id:
            return None
        return copy.deepcopy(platform)

    async def get_by_platform(self, user_id: str, platform_id: str) -> UserPlatform | None:
        for platform in self._platforms.values():
            if platform.user_id == user_id and platform.platform_id == platform_id:
                return copy.deepcopy(platform)
        return None

    async def list_for_user(self, user_id: str) -> list[UserPlatform]:
        matches = [p for p in self._platforms.values() if p.user_id == user_id]
        matches.sort(key=lambda p: p.platform_id)
        return [copy.deepcopy(p) for p in matches]

    async def save(self, platform: UserPlatform) -> None:
        self._platforms[platform.id] = copy.deepcopy(platform)

    async def delete(self, user_platform_id: int, user_id: str) -> bool:
        if not await self.get(user_platform_id, user_id):
            return False
        del self._platforms[user_platform_id]
        return True
