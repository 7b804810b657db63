import logging

from customs_ops.application.interfaces.audit_log_repo import AuditLogRepo
from customs_ops.application.interfaces.clock import Clock
from customs_ops.application.interfaces.failure_repo import FailureRepo
from customs_ops.application.interfaces.transaction_manager import TransactionManager
from customs_ops.domain.entities.audit_log import AuditAction, AuditLogEntry
from customs_ops.domain.entities.failure_record import FailureRecord
from customs_ops.domain.errors import FailureNotFoundError


class ResolveFailureUseCase:
    """
    Hands a failure over to a human: marks it manual_required regardless of
    its retry budget or current status, and leaves an audit trail.
    """

    def __init__(
        self,
        failure_repo: FailureRepo,
        audit_log_repo: AuditLogRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._failure_repo = failure_repo
        self._audit_log_repo = audit_log_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, failure_id: int, user_id: str, notes: str | None = None) -> FailureRecord:
        async with self._transaction_manager.start():
            record = await self._failure_repo.get(failure_id, user_id)
            if not record:
                raise FailureNotFoundError(failure_id)

            now = self._clock.now()
            previous_status = record.retry_status.value
            record.resolve_manually(now, resolved_by=user_id, notes=notes)
            record.updated_at = now
            await self._failure_repo.save(record)

            await self._audit_log_repo.add(
                AuditLogEntry(
                    user_id=user_id,
                    action=AuditAction.FAILURE_RESOLVED,
                    entity_type="api_failure",
                    entity_id=record.id,
                    upload_id=record.upload_id,
                    package_id=record.package_id,
                    shipment_id=record.shipment_id,
                    changes={
                        "retry_status": {"from": previous_status, "to": record.retry_status.value},
                        "endpoint": record.endpoint,
                    },
                    notes=record.resolution_notes,
                    created_at=now,
                )
            )

        self._logger.info(
            "Failure resolved manually",
            extra={"failure_id": record.id, "previous_status": previous_status, "user_id": user_id},
        )
        return record
