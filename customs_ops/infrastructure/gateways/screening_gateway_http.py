import json
import logging
from typing import Any

import httpx

from customs_ops.application.interfaces.screening_gateway import ProviderResult, ScreeningGateway
from customs_ops.domain.value_objects.provider_endpoint import ProviderEndpoint
from customs_ops.infrastructure.circuit_breaker import CircuitBreakerError, breaker_for

logger = logging.getLogger(__name__)


class ScreeningGatewayHTTP(ScreeningGateway):
    def __init__(
        self,
        base_url: str,
        api_key: str,
        environment: str,
        timeout_seconds: float = 30.0,
    ) -> None:
        """
        HTTP client for the SafePackage screening API, bound to one environment.

        Args:
            base_url: Base URL of the environment (sandbox or production)
            api_key: Key sent as `Authorization: ApiKey <key>`
            environment: Environment name, selects the circuit breaker
            timeout_seconds: Request timeout in seconds
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self.environment = getattr(environment, "value", environment)
        self._timeout = timeout_seconds
        self._breaker = breaker_for(self.environment)

    async def screen_package(self, request: dict[str, Any]) -> ProviderResult:
        return await self._request("POST", ProviderEndpoint.PACKAGE_SCREEN, request)

    async def pay_duty(self, request: dict[str, Any]) -> ProviderResult:
        return await self._request("POST", ProviderEndpoint.DUTY_PAY, request)

    async def submit_audit(self, request: dict[str, Any]) -> ProviderResult:
        return await self._request("POST", ProviderEndpoint.PACKAGE_AUDIT, request)

    async def register_shipment(self, request: dict[str, Any]) -> ProviderResult:
        return await self._request("POST", ProviderEndpoint.SHIPMENT_REGISTER, request)

    async def verify_shipment(self, shipment_id: str) -> ProviderResult:
        return await self._request("POST", ProviderEndpoint.SHIPMENT_VERIFY, {"shipmentId": shipment_id})

    async def get_package_tracking(self, package_id: str) -> ProviderResult:
        return await self._request("POST", ProviderEndpoint.PACKAGE_TRACKING, {"packageId": package_id})

    async def get_shipment_tracking(self, shipment_id: str) -> ProviderResult:
        return await self._request("POST", ProviderEndpoint.SHIPMENT_TRACKING, {"shipmentId": shipment_id})

    async def get_platforms(self) -> ProviderResult:
        return await self._request("GET", ProviderEndpoint.PLATFORMS)

    async def _request(
        self,
        method: str,
        endpoint: ProviderEndpoint,
        payload: dict[str, Any] | None = None,
    ) -> ProviderResult:
        """
        Issue one call, protected by the environment's circuit breaker.

        Never raises for provider failures: transport errors, an open
        circuit and non-2xx responses all come back as a failed result.
        """
        url = f"{self._base_url}{endpoint.value}"
        headers = {
            "Authorization": f"ApiKey {self._api_key}",
            "Content-Type": "application/json",
        }
        log_context = {"endpoint": endpoint.value, "environment": self.environment}

        try:
            with self._breaker.calling():
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.request(method, url, json=payload, headers=headers)
        except CircuitBreakerError as exc:
            logger.error(
                "Screening circuit breaker is open - service unavailable",
                extra={**log_context, "circuit_state": str(exc)},
            )
            return ProviderResult.failed(
                code="CIRCUIT_OPEN",
                message="Screening service temporarily unavailable (circuit breaker open)",
            )
        except httpx.TimeoutException as exc:
            logger.warning("Screening request timeout", extra={**log_context, "timeout": self._timeout})
            return ProviderResult.failed(code="TIMEOUT", message=str(exc) or "Request timed out")
        except httpx.HTTPError as exc:
            logger.error("Screening HTTP error", exc_info=exc, extra=log_context)
            return ProviderResult.failed(code="NETWORK_ERROR", message=str(exc) or exc.__class__.__name__)

        body: Any = None
        try:
            body = response.json()
        except (json.JSONDecodeError, ValueError):
            body = None

        if 200 <= response.status_code < 300:
            return ProviderResult.ok(body, http_status=response.status_code)

        details = body if isinstance(body, dict) else None
        message = None
        if details:
            message = details.get("message") or details.get("error")
        logger.warning(
            "Screening API returned an error",
            extra={**log_context, "http_status": response.status_code},
        )
        return ProviderResult.failed(
            code=str(response.status_code),
            message=message or response.reason_phrase or response.text,
            details=details,
            http_status=response.status_code,
        )
