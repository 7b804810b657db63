from __future__ import annotations

import copy

from customs_ops.application.interfaces.shipment_repo import ShipmentRepo
from customs_ops.domain.entities.shipment import Shipment


class InMemoryShipmentRepo(ShipmentRepo):
    def __init__(self) -> None:
        self._shipments: dict[int, Shipment] = {}
        self._next_id = 1

    async def add(self, shipment: Shipment) -> Shipment:
        shipment.id = self._next_id
        self._shipments[self._next_id] = copy.deepcopy(shipment)
        self._next_id += 1
        return shipment

    async def get(self, shipment_id: int, user_id: str) -> Shipment | None:
        shipment = self._shipments.get(shipment_id)
        if not shipment or shipment.user_id != user_id:
            return None
        return copy.deepcopy(shipment)

    async def save(self, shipment: Shipment) -> None:
        self._shipments[shipment.id] = copy.deepcopy(shipment)

    async def delete(self, shipment_id: int) -> None:
        self._shipments.pop(shipment_id, None)

    async def list(
        self, user_id: str, page: int = 1, page_size: int = 20
    ) -> tuple[list[Shipment], int]:
        matches = sorted(
            (s for s in self._shipments.values() if s.user_id == user_id),
            key=lambda s: s.id,
            reverse=True,
        )
        start = (page - 1) * page_size
        return [copy.deepcopy(s) for s in matches[start : start + page_size]], len(matches)
