from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any

from sqlalchemy import func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from customs_ops.application.interfaces.failure_repo import FailureFilters, FailureRepo
from customs_ops.domain.entities.failure_record import CLAIMABLE_STATUSES, FailureRecord, RetryStatus
from customs_ops.infrastructure.db.repositories._rows import as_utc
from customs_ops.infrastructure.db.tables import api_failures

_DATETIME_FIELDS = (
    "last_retry_at",
    "next_retry_at",
    "resolved_at",
    "created_at",
    "updated_at",
)


def _to_row(record: FailureRecord) -> dict[str, Any]:
    row = asdict(record)
    row.pop("id")
    row["retry_status"] = record.retry_status.value
    return row


def _from_row(data) -> FailureRecord:
    values = dict(data)
    values["retry_status"] = RetryStatus(values["retry_status"])
    for name in _DATETIME_FIELDS:
        values[name] = as_utc(values[name])
    return FailureRecord(**values)


class FailureRepoSQL(FailureRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, record: FailureRecord) -> FailureRecord:
        result = await self._session.execute(insert(api_failures).values(**_to_row(record)))
        record.id = result.inserted_primary_key[0]
        return record

    async def get(self, failure_id: int, user_id: str) -> FailureRecord | None:
        stmt = select(api_failures).where(
            api_failures.c.id == failure_id,
            api_failures.c.user_id == user_id,
        )
        row = (await self._session.execute(stmt)).first()
        return _from_row(row._mapping) if row else None

    async def save(self, record: FailureRecord) -> None:
        stmt = update(api_failures).where(api_failures.c.id == record.id).values(**_to_row(record))
        await self._session.execute(stmt)

    async def claim_for_retry(
        self, failure_id: int, user_id: str, now: datetime
    ) -> FailureRecord | None:
        stmt = (
            update(api_failures)
            .where(
                api_failures.c.id == failure_id,
                api_failures.c.user_id == user_id,
                api_failures.c.retry_status.in_([s.value for s in CLAIMABLE_STATUSES]),
                api_failures.c.retry_count < api_failures.c.max_retries,
            )
            .values(
                retry_status=RetryStatus.RETRYING.value,
                last_retry_at=now,
                updated_at=now,
            )
            .returning(api_failures)
        )
        row = (await self._session.execute(stmt)).first()
        return _from_row(row._mapping) if row else None

    def _filtered(self, stmt, user_id: str, filters: FailureFilters):
        stmt = stmt.where(api_failures.c.user_id == user_id)
        if filters.status:
            stmt = stmt.where(api_failures.c.retry_status == filters.status)
        if filters.environment:
            stmt = stmt.where(api_failures.c.environment == filters.environment)
        if filters.upload_id is not None:
            stmt = stmt.where(api_failures.c.upload_id == filters.upload_id)
        if filters.package_id is not None:
            stmt = stmt.where(api_failures.c.package_id == filters.package_id)
        return stmt

    async def list(
        self,
        user_id: str,
        filters: FailureFilters,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[FailureRecord], int]:
        stmt = (
            self._filtered(select(api_failures), user_id, filters)
            .order_by(api_failures.c.created_at.desc(), api_failures.c.id.desc())
            .limit(limit)
            .offset(offset)
        )
        rows = (await self._session.execute(stmt)).all()
        count_stmt = self._filtered(select(func.count()).select_from(api_failures), user_id, filters)
        total = (await self._session.execute(count_stmt)).scalar_one()
        return [_from_row(row._mapping) for row in rows], total

    async def list_retryable(
        self,
        user_id: str,
        failure_ids: list[int] | None = None,
        upload_id: int | None = None,
    ) -> list[FailureRecord]:
        stmt = select(api_failures).where(
            api_failures.c.user_id == user_id,
            api_failures.c.retry_status.in_([s.value for s in CLAIMABLE_STATUSES]),
            api_failures.c.retry_count < api_failures.c.max_retries,
        )
        if failure_ids is not None:
            stmt = stmt.where(api_failures.c.id.in_(failure_ids))
        if upload_id is not None:
            stmt = stmt.where(api_failures.c.upload_id == upload_id)
        rows = (await self._session.execute(stmt.order_by(api_failures.c.id))).all()
        return [_from_row(row._mapping) for row in rows]

    async def count_by_status(self, user_id: str) -> dict[str, int]:
        stmt = (
            select(api_failures.c.retry_status, func.count())
            .where(api_failures.c.user_id == user_id)
            .group_by(api_failures.c.retry_status)
        )
        rows = (await self._session.execute(stmt)).all()
        return {status: count for status, count in rows}
