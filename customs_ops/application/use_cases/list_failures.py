from customs_ops.application.failure_log import FailureLog
from customs_ops.application.interfaces.failure_repo import FailureFilters
from customs_ops.domain.entities.failure_record import FailureRecord
from customs_ops.domain.errors import FailureNotFoundError


class ListFailuresUseCase:
    def __init__(self, failure_log: FailureLog) -> None:
        self._failure_log = failure_log

    async def execute(
        self,
        user_id: str,
        filters: FailureFilters | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[FailureRecord], int]:
        return await self._failure_log.list(user_id, filters or FailureFilters(), limit=limit, offset=offset)


class GetFailureStatsUseCase:
    def __init__(self, failure_log: FailureLog) -> None:
        self._failure_log = failure_log

    async def execute(self, user_id: str) -> dict[str, int]:
        return await self._failure_log.stats(user_id)


class GetFailureUseCase:
    def __init__(self, failure_log: FailureLog) -> None:
        self._failure_log = failure_log

    async def execute(self, failure_id: int, user_id: str) -> FailureRecord:
        record = await self._failure_log.get(failure_id, user_id)
        if not record:
            raise FailureNotFoundError(failure_id)
        return record
