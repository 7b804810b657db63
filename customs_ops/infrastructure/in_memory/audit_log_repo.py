import copy

from customs_ops.application.interfaces.audit_log_repo import AuditLogRepo
from customs_ops.domain.entities.audit_log import AuditLogEntry


class InMemoryAuditLogRepo(AuditLogRepo):
    def __init__(self) -> None:
        self.entries: list[AuditLogEntry] = []
        self._next_id = 1

    async def add(self, entry: AuditLogEntry) -> AuditLogEntry:
        entry.id = self._next_id
        self.entries.append(copy.deepcopy(entry))
        self._next_id += 1
        return entry

    async def list_for_entity(self, entity_type: str, entity_id: int) -> list[AuditLogEntry]:
        return [
            copy.deepcopy(e)
            for e in reversed(self.entries)
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
