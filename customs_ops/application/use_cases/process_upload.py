import logging

from customs_ops.application.dtos.provider import PackageScreeningResult
from customs_ops.application.failure_log import FailureLog
from customs_ops.application.interfaces.clock import Clock
from customs_ops.application.interfaces.package_repo import PackageRepo
from customs_ops.application.interfaces.screening_gateway import ScreeningGatewaySelector
from customs_ops.application.interfaces.transaction_manager import TransactionManager
from customs_ops.application.interfaces.upload_repo import UploadRepo
from customs_ops.application.package_factory import build_screened_package
from customs_ops.application.provider_errors import guarded_call, parse_provider_data
from customs_ops.domain.entities.package import PackageStatus
from customs_ops.domain.entities.upload import Upload
from customs_ops.domain.errors import UploadNotFoundError
from customs_ops.domain.value_objects.provider_endpoint import ProviderEndpoint

_STATUS_COUNTERS = {
    PackageStatus.ACCEPTED: "accepted",
    PackageStatus.REJECTED: "rejected",
    PackageStatus.INCONCLUSIVE: "inconclusive",
    PackageStatus.AUDIT_REQUIRED: "audit_required",
}


class ProcessUploadUseCase:
    """
    Screens every row of a validated upload, in order.

    Each row commits on its own: a success creates a package, a failure
    records a retryable screening failure tagged with the row number.
    """

    def __init__(
        self,
        upload_repo: UploadRepo,
        package_repo: PackageRepo,
        failure_log: FailureLog,
        gateway_selector: ScreeningGatewaySelector,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._upload_repo = upload_repo
        self._package_repo = package_repo
        self._failure_log = failure_log
        self._gateway_selector = gateway_selector
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, upload_id: int, user_id: str) -> Upload:
        async with self._transaction_manager.start():
            upload = await self._upload_repo.get(upload_id, user_id)
            if not upload:
                raise UploadNotFoundError(upload_id)
            upload.start_processing()
            gateway = self._gateway_selector.for_environment(upload.environment)
            upload.updated_at = self._clock.now()
            await self._upload_repo.save(upload)

        counters = {
            "total": upload.total_rows,
            "processed": 0,
            "accepted": 0,
            "rejected": 0,
            "inconclusive": 0,
            "audit_required": 0,
            "failed": 0,
        }

        for row_number, row in enumerate(upload.rows, start=1):
            result = await guarded_call(
                gateway.screen_package(row),
                operation="upload_screen_package",
                upload_id=upload.id,
                row_number=row_number,
            )
            screening, result = parse_provider_data(result, PackageScreeningResult)

            async with self._transaction_manager.start():
                if screening is None:
                    await self._failure_log.record(
                        user_id=user_id,
                        endpoint=ProviderEndpoint.PACKAGE_SCREEN.value,
                        environment=upload.environment,
                        request_body=row,
                        result=result,
                        upload_id=upload.id,
                        external_id=row.get("externalId"),
                        row_number=row_number,
                    )
                    counters["failed"] += 1
                else:
                    package = build_screened_package(
                        request_body=row,
                        result=screening,
                        user_id=user_id,
                        environment=upload.environment,
                        now=self._clock.now(),
                        upload_id=upload.id,
                    )
                    await self._package_repo.add(package)
                    counter = _STATUS_COUNTERS.get(package.status)
                    if counter:
                        counters[counter] += 1
            counters["processed"] += 1

        async with self._transaction_manager.start():
            now = self._clock.now()
            upload.complete(counters, now)
            upload.updated_at = now
            await self._upload_repo.save(upload)

        self._logger.info(
            "Upload processed",
            extra={"upload_id": upload.id, "upload_status": upload.status.value, **counters},
        )
        return upload
