from dataclasses import asdict
from typing import Any

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from customs_ops.application.interfaces.upload_repo import UploadRepo
from customs_ops.domain.entities.upload import Upload, UploadStatus
from customs_ops.infrastructure.db.repositories._rows import as_utc
from customs_ops.infrastructure.db.tables import uploads


def _to_row(upload: Upload) -> dict[str, Any]:
    row = asdict(upload)
    row.pop("id")
    row["status"] = upload.status.value
    row["total_rows"] = upload.total_rows
    return row


def _from_row(data) -> Upload:
    values = dict(data)
    values.pop("total_rows")
    values["status"] = UploadStatus(values["status"])
    values["validation_errors"] = values["validation_errors"] or []
    for name in ("processing_completed_at", "created_at", "updated_at"):
        values[name] = as_utc(values[name])
    return Upload(**values)


class UploadRepoSQL(UploadRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, upload: Upload) -> Upload:
        result = await self._session.execute(insert(uploads).values(**_to_row(upload)))
        upload.id = result.inserted_primary_key[0]
        return upload

    async def get(self, upload_id: int, user_id: str) -> Upload | None:
        stmt = select(uploads).where(uploads.c.id == upload_id, uploads.c.user_id == user_id)
        row = (await self._session.execute(stmt)).first()
        return _from_row(row._mapping) if row else None

    async def save(self, upload: Upload) -> None:
        stmt = update(uploads).where(uploads.c.id == upload.id).values(**_to_row(upload))
        await self._session.execute(stmt)
