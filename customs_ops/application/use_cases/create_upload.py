import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from customs_ops.application.dtos.provider import PackageScreeningRequest
from customs_ops.application.interfaces.clock import Clock
from customs_ops.application.interfaces.transaction_manager import TransactionManager
from customs_ops.application.interfaces.upload_repo import UploadRepo
from customs_ops.domain.entities.upload import Upload, UploadStatus
from customs_ops.domain.errors import UploadNotFoundError, ValidationError


def validate_rows(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Validate each row as a screening request. Row numbers are 1-based."""
    errors = []
    for row_number, row in enumerate(rows, start=1):
        try:
            PackageScreeningRequest.model_validate(row)
        except PydanticValidationError as exc:
            for error in exc.errors():
                errors.append(
                    {
                        "row": row_number,
                        "external_id": row.get("externalId"),
                        "field": ".".join(str(part) for part in error["loc"]),
                        "message": error["msg"],
                    }
                )
    return errors


class CreateUploadUseCase:
    def __init__(
        self,
        upload_repo: UploadRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._upload_repo = upload_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        user_id: str,
        filename: str,
        environment: str,
        rows: list[dict[str, Any]],
    ) -> Upload:
        if not rows:
            raise ValidationError("rows", "Upload must contain at least one row")

        now = self._clock.now()
        upload = Upload(
            user_id=user_id,
            filename=filename,
            environment=getattr(environment, "value", environment),
            status=UploadStatus.VALIDATING,
            rows=rows,
            created_at=now,
            updated_at=now,
        )
        upload.apply_validation(validate_rows(rows))

        async with self._transaction_manager.start():
            upload = await self._upload_repo.add(upload)

        self._logger.info(
            "Upload created",
            extra={
                "upload_id": upload.id,
                "total_rows": upload.total_rows,
                "upload_status": upload.status.value,
                "validation_errors": len(upload.validation_errors),
            },
        )
        return upload


class GetUploadUseCase:
    def __init__(self, upload_repo: UploadRepo) -> None:
        self._upload_repo = upload_repo

    async def execute(self, upload_id: int, user_id: str) -> Upload:
        upload = await self._upload_repo.get(upload_id, user_id)
        if not upload:
            raise UploadNotFoundError(upload_id)
        return upload
