from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from customs_ops.domain.entities.failure_record import FailureRecord


@dataclass
class FailureFilters:
    status: str | None = None
    environment: str | None = None
    upload_id: int | None = None
    package_id: int | None = None


class FailureRepo:
    async def add(self, record: FailureRecord) -> FailureRecord:
        raise NotImplementedError

    async def get(self, failure_id: int, user_id: str) -> FailureRecord | None:
        raise NotImplementedError

    async def save(self, record: FailureRecord) -> None:
        raise NotImplementedError

    async def claim_for_retry(
        self, failure_id: int, user_id: str, now: datetime
    ) -> FailureRecord | None:
        """
        Conditionally move a record to `retrying`.

        Succeeds only while the record is pending or manual_required and has
        retry budget left. Returns None when another caller holds the claim.
        """
        raise NotImplementedError

    async def list(
        self,
        user_id: str,
        filters: FailureFilters,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[FailureRecord], int]:
        raise NotImplementedError

    async def list_retryable(
        self,
        user_id: str,
        failure_ids: list[int] | None = None,
        upload_id: int | None = None,
    ) -> list[FailureRecord]:
        raise NotImplementedError

    async def count_by_status(self, user_id: str) -> dict[str, int]:
        raise NotImplementedError
