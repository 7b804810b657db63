import asyncio
from collections import defaultdict, deque
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from customs_ops.application.interfaces.screening_gateway import ProviderResult, ScreeningGateway


class StubScreeningGateway(ScreeningGateway):
    """
    In-process provider double.

    Succeeds by default (screening code 1). Tests script specific outcomes
    per operation with `queue(...)` and inspect `calls` afterwards.
    `delay` turns each call into a real suspension point so concurrency can
    be observed through `max_in_flight`.
    """

    def __init__(self, environment: str = "sandbox", delay: float = 0.0) -> None:
        self.environment = getattr(environment, "value", environment)
        self.delay = delay
        self.calls: list[tuple[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._scripted: dict[str, deque] = defaultdict(deque)

    def queue(self, operation: str, *results: ProviderResult | Exception) -> None:
        self._scripted[operation].extend(results)

    def calls_to(self, operation: str) -> list[Any]:
        return [payload for name, payload in self.calls if name == operation]

    async def screen_package(self, request: dict[str, Any]) -> ProviderResult:
        return await self._respond(
            "screen_package",
            request,
            lambda: {
                "packageId": f"SP-{uuid4().hex[:10].upper()}",
                "externalId": request.get("externalId"),
                "code": 1,
                "status": "accepted",
                "labelQrCode": "data:image/png;base64,iVBORw0KGgo=",
            },
        )

    async def pay_duty(self, request: dict[str, Any]) -> ProviderResult:
        return await self._respond(
            "pay_duty",
            request,
            lambda: {
                "packageId": request.get("packageId"),
                "ddpn": f"DDPN-{uuid4().hex[:8].upper()}",
                "totalDuty": 12.5,
            },
        )

    async def submit_audit(self, request: dict[str, Any]) -> ProviderResult:
        return await self._respond(
            "submit_audit",
            request,
            lambda: {"packageId": request.get("packageId"), "code": 1, "status": "passed"},
        )

    async def register_shipment(self, request: dict[str, Any]) -> ProviderResult:
        return await self._respond(
            "register_shipment",
            request,
            lambda: {"shipmentId": f"SH-{uuid4().hex[:10].upper()}"},
        )

    async def verify_shipment(self, shipment_id: str) -> ProviderResult:
        return await self._respond(
            "verify_shipment",
            shipment_id,
            lambda: {
                "shipmentId": shipment_id,
                "code": 1,
                "status": "accepted",
                "document": {"type": "PNG", "content": "iVBORw0KGgo="},
            },
        )

    async def get_package_tracking(self, package_id: str) -> ProviderResult:
        return await self._respond("get_package_tracking", package_id, self._tracking_events)

    async def get_shipment_tracking(self, shipment_id: str) -> ProviderResult:
        return await self._respond("get_shipment_tracking", shipment_id, self._tracking_events)

    async def get_platforms(self) -> ProviderResult:
        return await self._respond(
            "get_platforms",
            None,
            lambda: [{"id": "amazon", "url": "amazon.com"}, {"id": "ebay", "url": "ebay.com"}],
        )

    @staticmethod
    def _tracking_events() -> dict[str, Any]:
        return {
            "events": [
                {
                    "type": "screened",
                    "description": "Package screened",
                    "time": datetime(2026, 1, 15, 10, 0, tzinfo=timezone.utc).isoformat(),
                }
            ]
        }

    async def _respond(self, operation: str, payload: Any, default) -> ProviderResult:
        self.calls.append((operation, payload))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            scripted = self._scripted[operation]
            if scripted:
                result = scripted.popleft()
                if isinstance(result, Exception):
                    raise result
                return result
            return ProviderResult.ok(default())
        finally:
            self.in_flight -= 1
