from customs_ops.domain.entities.audit_log import AuditLogEntry


class AuditLogRepo:
    """Append-only: entries are never updated or deleted."""

    async def add(self, entry: AuditLogEntry) -> AuditLogEntry:
        raise NotImplementedError

    async def list_for_entity(self, entity_type: str, entity_id: int) -> list[AuditLogEntry]:
        raise NotImplementedError
