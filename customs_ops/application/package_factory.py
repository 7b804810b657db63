"""Materialization of a Package from a screening request and its result."""

from datetime import datetime
from typing import Any

from customs_ops.application.dtos.provider import PackageScreeningResult
from customs_ops.domain.entities.package import Package
from customs_ops.domain.result_codes import package_status_for_screening


def build_screened_package(
    request_body: dict[str, Any],
    result: PackageScreeningResult,
    user_id: str,
    environment: str,
    now: datetime,
    upload_id: int | None = None,
) -> Package:
    """
    Build a new Package row from the exact request sent to the provider plus
    the screening result. Shared by upload processing and failure retries so
    both paths produce identical packages.
    """
    package = Package(
        user_id=user_id,
        upload_id=upload_id,
        environment=environment,
        screening_request=dict(request_body),
        created_at=now,
        updated_at=now,
    )
    package.refresh_from_request(request_body)
    apply_screening_result(package, result, now)
    return package


def apply_screening_result(package: Package, result: PackageScreeningResult, now: datetime) -> None:
    package.apply_screening(
        status=package_status_for_screening(result.code),
        code=result.code,
        provider_status=result.status,
        provider_package_id=result.package_id,
        label_qr_code=result.label_qr_code,
        response=result.model_dump(mode="json", by_alias=True, exclude_none=True),
        now=now,
    )
