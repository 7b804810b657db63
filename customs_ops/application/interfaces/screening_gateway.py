from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from customs_ops.domain.errors import UnknownEnvironmentError


@dataclass
class ProviderError:
    code: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


@dataclass
class ProviderResult:
    """
    Uniform outcome of a provider call.

    `success` with `data` for 2xx responses, otherwise `error`. Gateways never
    raise for provider-level failures.
    """

    success: bool
    data: Any = None
    error: ProviderError | None = None
    http_status: int | None = None

    @classmethod
    def ok(cls, data: Any, http_status: int | None = 200) -> "ProviderResult":
        return cls(success=True, data=data, http_status=http_status)

    @classmethod
    def failed(
        cls,
        code: str | None,
        message: str | None,
        details: dict[str, Any] | None = None,
        http_status: int | None = None,
    ) -> "ProviderResult":
        return cls(
            success=False,
            error=ProviderError(code=code, message=message, details=details),
            http_status=http_status,
        )


class ScreeningGateway(ABC):
    """Port for the third-party customs screening API, bound to one environment."""

    environment: str

    @abstractmethod
    async def screen_package(self, request: dict[str, Any]) -> ProviderResult:
        pass

    @abstractmethod
    async def pay_duty(self, request: dict[str, Any]) -> ProviderResult:
        pass

    @abstractmethod
    async def submit_audit(self, request: dict[str, Any]) -> ProviderResult:
        pass

    @abstractmethod
    async def register_shipment(self, request: dict[str, Any]) -> ProviderResult:
        pass

    @abstractmethod
    async def verify_shipment(self, shipment_id: str) -> ProviderResult:
        pass

    @abstractmethod
    async def get_package_tracking(self, package_id: str) -> ProviderResult:
        pass

    @abstractmethod
    async def get_shipment_tracking(self, shipment_id: str) -> ProviderResult:
        pass

    @abstractmethod
    async def get_platforms(self) -> ProviderResult:
        pass


@dataclass
class ScreeningGatewaySelector:
    """Resolves the gateway for an environment; a call never mixes environments."""

    gateways: dict[str, ScreeningGateway] = field(default_factory=dict)

    def register(self, environment: str, gateway: ScreeningGateway) -> None:
        self.gateways[getattr(environment, "value", environment)] = gateway

    def for_environment(self, environment: str) -> ScreeningGateway:
        key = getattr(environment, "value", environment)
        gateway = self.gateways.get(key)
        if gateway is None:
            raise UnknownEnvironmentError(key)
        return gateway
