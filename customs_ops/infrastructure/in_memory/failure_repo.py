from __future__ import annotations

import copy
from datetime import datetime

from customs_ops.application.interfaces.failure_repo import FailureFilters, FailureRepo
from customs_ops.domain.entities.failure_record import CLAIMABLE_STATUSES, FailureRecord, RetryStatus


class InMemoryFailureRepo(FailureRepo):
    def __init__(self) -> None:
        self._records: dict[int, FailureRecord] = {}
        self._next_id = 1

    async def add(self, record: FailureRecord) -> FailureRecord:
        record.id = self._next_id
        self._records[self._next_id] = copy.deepcopy(record)
        self._next_id += 1
        return record

    async def get(self, failure_id: int, user_id: str) -> FailureRecord | None:
        record = self._records.get(failure_id)
        if not record or record.user_id != user_id:
            return None
        return copy.deepcopy(record)

    async def save(self, record: FailureRecord) -> None:
        self._records[record.id] = copy.deepcopy(record)

    async def claim_for_retry(
        self, failure_id: int, user_id: str, now: datetime
    ) -> FailureRecord | None:
        # No await between check and write: atomic within the event loop
        record = self._records.get(failure_id)
        if not record or record.user_id != user_id or not record.is_claimable:
            return None
        record.mark_retrying(now)
        record.updated_at = now
        return copy.deepcopy(record)

    async def list(
        self,
        user_id: str,
        filters: FailureFilters,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[FailureRecord], int]:
        matches = [
            r
            for r in self._records.values()
            if r.user_id == user_id
            and (filters.status is None or r.retry_status.value == filters.status)
            and (filters.environment is None or r.environment == filters.environment)
            and (filters.upload_id is None or r.upload_id == filters.upload_id)
            and (filters.package_id is None or r.package_id == filters.package_id)
        ]
        matches.sort(key=lambda r: r.id, reverse=True)
        page = matches[offset : offset + limit]
        return [copy.deepcopy(r) for r in page], len(matches)

    async def list_retryable(
        self,
        user_id: str,
        failure_ids: list[int] | None = None,
        upload_id: int | None = None,
    ) -> list[FailureRecord]:
        matches = [
            r
            for r in self._records.values()
            if r.user_id == user_id
            and r.retry_status in CLAIMABLE_STATUSES
            and r.retry_count < r.max_retries
            and (failure_ids is None or r.id in failure_ids)
            and (upload_id is None or r.upload_id == upload_id)
        ]
        matches.sort(key=lambda r: r.id)
        return [copy.deepcopy(r) for r in matches]

    async def count_by_status(self, user_id: str) -> dict[str, int]:
        counts = {status.value: 0 for status in RetryStatus}
        for record in self._records.values():
            if record.user_id == user_id:
                counts[record.retry_status.value] += 1
        return counts
