import pytest

from customs_ops.domain.entities.package import Package, PackageStatus
from customs_ops.domain.errors import (
    DutyAlreadyPaidError,
    InvalidPackageStatusError,
    MissingProviderIdError,
    ValidationError,
)
from customs_ops.application.interfaces.clock import FakeClock


def test_duty_guard_checks_provider_id_first():
    package = Package(id=1, status=PackageStatus.PENDING)
    with pytest.raises(MissingProviderIdError):
        package.ensure_duty_payable()


def test_duty_guard_reports_already_paid_before_status():
    package = Package(id=1, status=PackageStatus.DUTY_PAID, provider_package_id="SP-1", ddpn="DDPN-1")
    with pytest.raises(DutyAlreadyPaidError):
        package.ensure_duty_payable()


def test_duty_guard_rejects_unpayable_status():
    package = Package(id=1, status=PackageStatus.REJECTED, provider_package_id="SP-1")
    with pytest.raises(InvalidPackageStatusError):
        package.ensure_duty_payable()


def test_audit_requires_two_images():
    package = Package(id=1, status=PackageStatus.AUDIT_REQUIRED)
    with pytest.raises(ValidationError, match="At least 2 images") as exc_info:
        package.ensure_auditable(["only-one"], None)
    assert exc_info.value.field == "images"


def test_audit_remark_limited_to_100_chars():
    package = Package(id=1, status=PackageStatus.AUDIT_REQUIRED)
    with pytest.raises(ValidationError, match="100 characters") as exc_info:
        package.ensure_auditable(["a", "b"], "x" * 101)
    assert exc_info.value.field == "remark"


def test_resubmit_records_lineage_and_clears_screening():
    clock = FakeClock()
    package = Package(
        id=5,
        status=PackageStatus.REJECTED,
        screening_code=2,
        screening_status="rejected",
        external_id="EXT-1",
    )

    package.resubmit({"externalId": "EXT-1", "sellerId": "S-2"}, "fixed seller", "user-1", clock.now())

    assert package.status == PackageStatus.PENDING
    assert package.screening_code is None
    assert package.screening_status is None
    assert package.original_package_id == 5
    assert package.resubmission_count == 1
    assert package.seller_id == "S-2"
    assert package.corrected_by == "user-1"


def test_resubmit_not_allowed_from_accepted():
    package = Package(id=5, status=PackageStatus.ACCEPTED)
    with pytest.raises(InvalidPackageStatusError):
        package.resubmit({}, None, "user-1", FakeClock().now())
