import asyncio
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from customs_ops.application.dtos.outcomes import BatchRetryItem, BatchRetryReport
from customs_ops.application.interfaces.failure_repo import FailureRepo
from customs_ops.application.use_cases.retry_failure import RetryFailureUseCase
from customs_ops.domain.entities.failure_record import UNSUPPORTED_ENDPOINT_NOTE, FailureRecord
from customs_ops.domain.errors import DomainError, InvalidRetryRequestError

BATCH_WINDOW_SIZE = 10
BATCH_SUCCESS_NOTE = "Batch retry successful on attempt {attempt}"
BATCH_EXHAUSTED_NOTE = "Maximum retry attempts reached during batch retry"

RetryScope = Callable[[], AbstractAsyncContextManager[RetryFailureUseCase]]


class BatchRetryFailuresUseCase:
    """
    Fans the retry engine out over eligible failures in fixed-size windows.

    Records inside a window are retried concurrently; windows run one after
    another, so at most `window_size` provider calls are in flight. Each
    record gets its own engine scope (and database session) from
    `retry_scope`, so one record's failure never affects another.
    """

    def __init__(
        self,
        failure_repo: FailureRepo,
        retry_scope: RetryScope,
        window_size: int = BATCH_WINDOW_SIZE,
    ) -> None:
        self._failure_repo = failure_repo
        self._retry_scope = retry_scope
        self._window_size = window_size
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        user_id: str,
        failure_ids: list[int] | None = None,
        upload_id: int | None = None,
    ) -> BatchRetryReport:
        if not failure_ids and upload_id is None:
            raise InvalidRetryRequestError()

        eligible = await self._failure_repo.list_retryable(
            user_id, failure_ids=failure_ids or None, upload_id=upload_id
        )
        if not eligible:
            return BatchRetryReport(message="No failures to retry")

        report = BatchRetryReport()
        for start in range(0, len(eligible), self._window_size):
            window = eligible[start : start + self._window_size]
            items = await asyncio.gather(*(self._retry_one(record, user_id) for record in window))
            report.results.extend(items)

        self._logger.info(
            "Batch retry finished",
            extra={
                "upload_id": upload_id,
                "total": report.total,
                "successful": report.successful,
                "failed": report.failed,
            },
        )
        return report

    async def _retry_one(self, record: FailureRecord, user_id: str) -> BatchRetryItem:
        if not record.is_auto_retryable:
            return BatchRetryItem(
                failure_id=record.id,
                external_id=record.external_id,
                success=False,
                message=UNSUPPORTED_ENDPOINT_NOTE,
            )
        try:
            async with self._retry_scope() as engine:
                outcome = await engine.execute(
                    record.id,
                    user_id,
                    success_note=BATCH_SUCCESS_NOTE,
                    exhausted_note=BATCH_EXHAUSTED_NOTE,
                )
        except DomainError as exc:
            return BatchRetryItem(
                failure_id=record.id,
                external_id=record.external_id,
                success=False,
                message=exc.message,
            )
        except Exception as exc:
            # Isolated per record: the rest of the batch keeps going
            self._logger.exception(
                "Batch retry item raised", extra={"failure_id": record.id}
            )
            return BatchRetryItem(
                failure_id=record.id,
                external_id=record.external_id,
                success=False,
                message=str(exc) or exc.__class__.__name__,
            )

        package = outcome.package
        return BatchRetryItem(
            failure_id=record.id,
            external_id=record.external_id,
            success=outcome.success,
            message="Retry successful" if outcome.success else outcome.message,
            package_id=package.id if package else None,
            provider_package_id=package.provider_package_id if package else None,
            new_status=package.status.value if package else outcome.retry_status.value,
        )
