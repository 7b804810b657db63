from dataclasses import asdict
from typing import Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from customs_ops.application.interfaces.user_platform_repo import UserPlatformRepo
from customs_ops.domain.entities.user_platform import UserPlatform
from customs_ops.infrastructure.db.repositories._rows import as_utc
from customs_ops.infrastructure.db.tables import user_platforms


def _to_row(platform: UserPlatform) -> dict[str, Any]:
    row = asdict(platform)
    row.pop("id")
    return row


def _from_row(data) -> UserPlatform:
    values = dict(data)
    values["is_enabled"] = bool(values["is_enabled"])
    for name in ("created_at", "updated_at"):
        values[name] = as_utc(values[name])
    return UserPlatform(**values)


class UserPlatformRepoSQL(UserPlatformRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, platform: UserPlatform) -> UserPlatform:
        result = await self._session.execute(insert(user_platforms).values(**_to_row(platform)))
        platform.id = result.inserted_primary_key[0]
        return platform

    async def get(self, user_platform_id: int, user_id: str) -> UserPlatform | None:
        stmt = select(user_platforms).where(
            user_platforms.c.id == user_platform_id, user_platforms.c.user_id == user_id
        )
        row = (await self._session.execute(stmt)).first()
        return _from_row(row._mapping) if row else None

    async def get_by_platform(self, user_id: str, platform_id: str) -> UserPlatform | None:
        stmt = select(user_platforms).where(
            user_platforms.c.user_id == user_id, user_platforms.c.platform_id == platform_id
        )
        row = (await self._session.execute(stmt)).first()
        return _from_row(row._mapping) if row else None

    async def list_for_user(self, user_id: str) -> list[UserPlatform]:
        stmt = (
            select(user_platforms)
            .where(user_platforms.c.user_id == user_id)
            .order_by(user_platforms.c.platform_id)
        )
        rows = (await self._session.execute(stmt)).all()
        return [_from_row(row._mapping) for row in rows]

    async def save(self, platform: UserPlatform) -> None:
        stmt = update(user_platforms).where(user_platforms.c.id == platform.id).values(**_to_row(platform))
        await self._session.execute(stmt)

    async def delete(self, user_platform_id: int, user_id: str) -> bool:
        stmt = delete(user_platforms).where(
            user_platforms.c.id == user_platform_id, user_platforms.c.user_id == user_id
        )
        result = await self._session.execute(stmt)
        return bool(result.rowcount)
