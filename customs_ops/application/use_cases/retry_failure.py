import logging

from pydantic import ValidationError as PydanticValidationError

from customs_ops.application.dtos.outcomes import RetryOutcome
from customs_ops.application.dtos.provider import PackageScreeningRequest, PackageScreeningResult
from customs_ops.application.failure_log import FailureLog
from customs_ops.application.interfaces.clock import Clock
from customs_ops.application.interfaces.failure_repo import FailureRepo
from customs_ops.application.interfaces.package_repo import PackageRepo
from customs_ops.application.interfaces.screening_gateway import (
    ProviderResult,
    ScreeningGatewaySelector,
)
from customs_ops.application.interfaces.transaction_manager import TransactionManager
from customs_ops.application.package_factory import apply_screening_result, build_screened_package
from customs_ops.application.provider_errors import (
    describe_provider_error,
    guarded_call,
    parse_provider_data,
)
from customs_ops.domain.entities.failure_record import (
    MAX_RETRIES_NOTE,
    UNSUPPORTED_ENDPOINT_NOTE,
    FailureRecord,
    RetryStatus,
)
from customs_ops.domain.entities.package import Package
from customs_ops.domain.errors import (
    FailureAlreadyResolvedError,
    FailureNotFoundError,
    RetryInProgressError,
    RetryNotDueError,
)

SUCCESS_NOTE = "Retry successful on attempt {attempt}"
INVALID_PAYLOAD_NOTE = "Stored request is not a valid screening request"


class RetryFailureUseCase:
    """
    Drives one FailureRecord through exactly one retry attempt.

    Guards run in order and short-circuit without calling the provider:
    already resolved, budget exhausted, endpoint not auto-retryable. The
    record is then claimed with a conditional update so only one caller
    re-issues the request.
    """

    def __init__(
        self,
        failure_repo: FailureRepo,
        package_repo: PackageRepo,
        failure_log: FailureLog,
        gateway_selector: ScreeningGatewaySelector,
        transaction_manager: TransactionManager,
        clock: Clock,
        enforce_schedule: bool = False,
    ) -> None:
        self._failure_repo = failure_repo
        self._package_repo = package_repo
        self._failure_log = failure_log
        self._gateway_selector = gateway_selector
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._enforce_schedule = enforce_schedule
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        failure_id: int,
        user_id: str,
        success_note: str = SUCCESS_NOTE,
        exhausted_note: str = MAX_RETRIES_NOTE,
    ) -> RetryOutcome:
        async with self._transaction_manager.start():
            record = await self._failure_repo.get(failure_id, user_id)
            if not record:
                raise FailureNotFoundError(failure_id)
            if record.retry_status == RetryStatus.SUCCESS:
                raise FailureAlreadyResolvedError(failure_id)

            if record.budget_exhausted:
                if record.retry_status != RetryStatus.EXHAUSTED:
                    await self._failure_log.mark_terminal(
                        record, RetryStatus.EXHAUSTED, MAX_RETRIES_NOTE
                    )
                return self._rejected(record, MAX_RETRIES_NOTE)

            if not record.is_auto_retryable:
                await self._failure_log.mark_terminal(
                    record, RetryStatus.MANUAL_REQUIRED, UNSUPPORTED_ENDPOINT_NOTE
                )
                return self._rejected(record, UNSUPPORTED_ENDPOINT_NOTE)

            if self._enforce_schedule and not record.is_due(self._clock.now()):
                raise RetryNotDueError(failure_id, record.next_retry_at)

            gateway = self._gateway_selector.for_environment(record.environment)

            claimed = await self._failure_log.mark_retrying(failure_id, user_id)
            if not claimed:
                raise RetryInProgressError(failure_id, record.retry_status.value)

        try:
            PackageScreeningRequest.model_validate(claimed.request_body)
        except PydanticValidationError:
            async with self._transaction_manager.start():
                await self._failure_log.mark_terminal(
                    claimed, RetryStatus.MANUAL_REQUIRED, INVALID_PAYLOAD_NOTE
                )
            return self._rejected(claimed, INVALID_PAYLOAD_NOTE)

        # The stored body is replayed verbatim
        result = await guarded_call(
            gateway.screen_package(claimed.request_body),
            operation="retry_screen_package",
            failure_id=claimed.id,
        )
        screening, result = parse_provider_data(result, PackageScreeningResult)

        async with self._transaction_manager.start():
            if screening is not None:
                return await self._reconcile_success(claimed, screening, user_id, success_note)
            return await self._reconcile_failure(claimed, result, exhausted_note)

    async def _reconcile_success(
        self,
        record: FailureRecord,
        screening: PackageScreeningResult,
        user_id: str,
        success_note: str,
    ) -> RetryOutcome:
        now = self._clock.now()
        package = await self._materialize(record, screening, user_id)
        record.mark_succeeded(now, user_id, package.id, success_note)
        record.updated_at = now
        await self._failure_repo.save(record)
        self._logger.info(
            "Failure retry succeeded",
            extra={
                "failure_id": record.id,
                "package_id": package.id,
                "attempt": record.retry_count,
                "package_status": package.status.value,
            },
        )
        return RetryOutcome(
            failure_id=record.id,
            success=True,
            retry_status=record.retry_status,
            retry_count=record.retry_count,
            message="Retry successful",
            external_id=record.external_id,
            package=package,
        )

    async def _materialize(
        self, record: FailureRecord, screening: PackageScreeningResult, user_id: str
    ) -> Package:
        now = self._clock.now()
        if record.package_id is not None:
            # Resubmission failures point at an existing package
            existing = await self._package_repo.get(record.package_id, user_id)
            if existing:
                apply_screening_result(existing, screening, now)
                existing.updated_at = now
                await self._package_repo.save(existing)
                return existing
        package = build_screened_package(
            request_body=record.request_body,
            result=screening,
            user_id=user_id,
            environment=record.environment,
            now=now,
            upload_id=record.upload_id,
        )
        return await self._package_repo.add(package)

    async def _reconcile_failure(
        self, record: FailureRecord, result: ProviderResult, exhausted_note: str
    ) -> RetryOutcome:
        now = self._clock.now()
        error = result.error
        message = describe_provider_error(error)
        record.register_failed_attempt(
            now,
            error_message=message,
            error_code=error.code if error else None,
            error_details=error.details if error else None,
            exhausted_note=exhausted_note,
        )
        record.status_code = result.http_status
        record.updated_at = now
        await self._failure_repo.save(record)

        if record.retry_status == RetryStatus.EXHAUSTED:
            self._logger.error(
                "Failure retry exhausted",
                extra={"failure_id": record.id, "attempt": record.retry_count, "error_code": record.error_code},
            )
        else:
            self._logger.warning(
                "Failure retry scheduled",
                extra={
                    "failure_id": record.id,
                    "attempt": record.retry_count,
                    "next_retry_at": record.next_retry_at.isoformat() if record.next_retry_at else None,
                    "error_code": record.error_code,
                },
            )
        return RetryOutcome(
            failure_id=record.id,
            success=False,
            retry_status=record.retry_status,
            retry_count=record.retry_count,
            message=message,
            external_id=record.external_id,
            next_retry_at=record.next_retry_at,
        )

    @staticmethod
    def _rejected(record: FailureRecord, message: str) -> RetryOutcome:
        return RetryOutcome(
            failure_id=record.id,
            success=False,
            retry_status=record.retry_status,
            retry_count=record.retry_count,
            message=message,
            external_id=record.external_id,
            next_retry_at=record.next_retry_at,
            rejected=True,
        )

