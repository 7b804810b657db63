from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from customs_ops.domain.entities.failure_record import RetryStatus
from customs_ops.domain.entities.package import Package
from customs_ops.domain.entities.shipment import Shipment
from customs_ops.domain.entities.tracking_event import TrackingEvent


@dataclass
class RetryOutcome:
    """
    Result of driving one FailureRecord through one retry attempt.

    `rejected` marks guard short-circuits (budget exhausted, unsupported
    endpoint, invalid replay payload): no provider call was made.
    """

    failure_id: int
    success: bool
    retry_status: RetryStatus
    retry_count: int
    message: str
    external_id: str | None = None
    next_retry_at: datetime | None = None
    package: Package | None = None
    rejected: bool = False


@dataclass
class BatchRetryItem:
    failure_id: int
    external_id: str | None
    success: bool
    message: str
    package_id: int | None = None
    provider_package_id: str | None = None
    new_status: str | None = None


@dataclass
class BatchRetryReport:
    results: list[BatchRetryItem] = field(default_factory=list)
    message: str | None = None

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return sum(1 for item in self.results if item.success)

    @property
    def failed(self) -> int:
        return self.total - self.successful


@dataclass
class ProviderCallOutcome:
    """Outcome of a guarded provider operation on a package or shipment."""

    success: bool
    message: str
    package: Package | None = None
    shipment: Shipment | None = None
    failure_id: int | None = None
    data: dict[str, Any] | None = None


@dataclass
class TrackingView:
    provider_id: str
    events: list[TrackingEvent]
    source: str  # "api" | "cache"
    api_error: str | None = None
