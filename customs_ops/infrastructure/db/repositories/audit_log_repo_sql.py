from dataclasses import asdict

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from customs_ops.application.interfaces.audit_log_repo import AuditLogRepo
from customs_ops.domain.entities.audit_log import AuditAction, AuditLogEntry
from customs_ops.infrastructure.db.repositories._rows import as_utc
from customs_ops.infrastructure.db.tables import audit_logs


class AuditLogRepoSQL(AuditLogRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, entry: AuditLogEntry) -> AuditLogEntry:
        row = asdict(entry)
        row.pop("id")
        row["action"] = entry.action.value
        result = await self._session.execute(insert(audit_logs).values(**row))
        entry.id = result.inserted_primary_key[0]
        return entry

    async def list_for_entity(self, entity_type: str, entity_id: int) -> list[AuditLogEntry]:
        stmt = (
            select(audit_logs)
            .where(audit_logs.c.entity_type == entity_type, audit_logs.c.entity_id == entity_id)
            .order_by(audit_logs.c.id.desc())
        )
        entries = []
        for row in (await self._session.execute(stmt)).all():
            values = dict(row._mapping)
            values["action"] = AuditAction(values["action"])
            values["changes"] = values["changes"] or {}
            values["created_at"] = as_utc(values["created_at"])
            entries.append(AuditLogEntry(**values))
        return entries
