from __future__ import annotations

from customs_ops.domain.entities.shipment import Shipment


class ShipmentRepo:
    async def add(self, shipment: Shipment) -> Shipment:
        raise NotImplementedError

    async def get(self, shipment_id: int, user_id: str) -> Shipment | None:
        raise NotImplementedError

    async def save(self, shipment: Shipment) -> None:
        raise NotImplementedError

    async def delete(self, shipment_id: int) -> None:
        raise NotImplementedError

    async def list(
        self, user_id: str, page: int = 1, page_size: int = 20
    ) -> tuple[list[Shipment], int]:
        raise NotImplementedError
