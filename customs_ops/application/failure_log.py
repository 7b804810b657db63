from __future__ import annotations

import logging
from typing import Any

from customs_ops.application.interfaces.clock import Clock
from customs_ops.application.interfaces.failure_repo import FailureFilters, FailureRepo
from customs_ops.application.interfaces.screening_gateway import ProviderResult
from customs_ops.application.provider_errors import describe_provider_error
from customs_ops.domain.entities.failure_record import (
    DEFAULT_MAX_RETRIES,
    FailureRecord,
    RetryStatus,
)


class FailureLog:
    """
    Durable, queryable log of failed provider calls.

    Every domain operation that gets a failed ProviderResult records it here
    with enough context to replay the call verbatim.
    """

    def __init__(self, failure_repo: FailureRepo, clock: Clock) -> None:
        self._failure_repo = failure_repo
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def record(
        self,
        user_id: str,
        endpoint: str,
        environment: str,
        request_body: dict[str, Any],
        result: ProviderResult,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_status: RetryStatus = RetryStatus.PENDING,
        method: str = "POST",
        upload_id: int | None = None,
        package_id: int | None = None,
        shipment_id: int | None = None,
        external_id: str | None = None,
        row_number: int | None = None,
    ) -> FailureRecord:
        error = result.error
        record = FailureRecord.create(
            user_id=user_id,
            endpoint=endpoint,
            method=method,
            environment=getattr(environment, "value", environment),
            request_body=request_body,
            now=self._clock.now(),
            error_message=describe_provider_error(error),
            error_code=error.code if error else None,
            error_details=error.details if error else None,
            status_code=result.http_status,
            max_retries=max_retries,
            retry_status=retry_status,
            upload_id=upload_id,
            package_id=package_id,
            shipment_id=shipment_id,
            external_id=external_id,
            row_number=row_number,
        )
        record = await self._failure_repo.add(record)
        self._logger.warning(
            "Provider call failed, failure recorded",
            extra={
                "failure_id": record.id,
                "endpoint": endpoint,
                "environment": record.environment,
                "error_code": record.error_code,
                "retry_status": record.retry_status.value,
                "external_id": external_id,
            },
        )
        return record

    async def get(self, failure_id: int, user_id: str) -> FailureRecord | None:
        return await self._failure_repo.get(failure_id, user_id)

    async def list(
        self,
        user_id: str,
        filters: FailureFilters,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[FailureRecord], int]:
        return await self._failure_repo.list(user_id, filters, limit=limit, offset=offset)

    async def stats(self, user_id: str) -> dict[str, int]:
        counts = await self._failure_repo.count_by_status(user_id)
        return {
            "total": sum(counts.values()),
            "pending": counts.get(RetryStatus.PENDING.value, 0),
            "retrying": counts.get(RetryStatus.RETRYING.value, 0),
            "exhausted": counts.get(RetryStatus.EXHAUSTED.value, 0),
            "manual_required": counts.get(RetryStatus.MANUAL_REQUIRED.value, 0),
            "resolved": counts.get(RetryStatus.SUCCESS.value, 0),
        }

    async def mark_retrying(self, failure_id: int, user_id: str) -> FailureRecord | None:
        return await self._failure_repo.claim_for_retry(failure_id, user_id, self._clock.now())

    async def mark_terminal(
        self,
        record: FailureRecord,
        status: RetryStatus,
        notes: str,
        resolved_by: str | None = None,
    ) -> FailureRecord:
        now = self._clock.now()
        if status == RetryStatus.EXHAUSTED:
            record.mark_exhausted(now, notes)
        elif status == RetryStatus.MANUAL_REQUIRED:
            record.mark_manual_required(now, notes)
        else:
            raise ValueError(f"'{status.value}' is not a terminal failure status")
        if resolved_by:
            record.resolved_by = resolved_by
        record.updated_at = now
        await self._failure_repo.save(record)
        return record
