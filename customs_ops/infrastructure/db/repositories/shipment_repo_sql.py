from __future__ import annotations

from dataclasses import asdict
from typing import Any

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from customs_ops.application.interfaces.shipment_repo import ShipmentRepo
from customs_ops.domain.entities.shipment import DocumentType, Shipment, ShipmentStatus
from customs_ops.infrastructure.db.repositories._rows import as_utc
from customs_ops.infrastructure.db.tables import shipments

_DATETIME_FIELDS = ("registered_at", "verified_at", "created_at", "updated_at")


def _to_row(shipment: Shipment) -> dict[str, Any]:
    row = asdict(shipment)
    row.pop("id")
    row["status"] = shipment.status.value
    doc_type = shipment.verification_document_type
    row["verification_document_type"] = doc_type.value if doc_type else None
    return row


def _from_row(data) -> Shipment:
    values = dict(data)
    values["status"] = ShipmentStatus(values["status"])
    if values["verification_document_type"]:
        values["verification_document_type"] = DocumentType(values["verification_document_type"])
    values["registration_request"] = values["registration_request"] or {}
    for name in _DATETIME_FIELDS:
        values[name] = as_utc(values[name])
    return Shipment(**values)


class ShipmentRepoSQL(ShipmentRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, shipment: Shipment) -> Shipment:
        result = await self._session.execute(insert(shipments).values(**_to_row(shipment)))
        shipment.id = result.inserted_primary_key[0]
        return shipment

    async def get(self, shipment_id: int, user_id: str) -> Shipment | None:
        stmt = select(shipments).where(shipments.c.id == shipment_id, shipments.c.user_id == user_id)
        row = (await self._session.execute(stmt)).first()
        return _from_row(row._mapping) if row else None

    async def save(self, shipment: Shipment) -> None:
        stmt = update(shipments).where(shipments.c.id == shipment.id).values(**_to_row(shipment))
        await self._session.execute(stmt)

    async def delete(self, shipment_id: int) -> None:
        await self._session.execute(delete(shipments).where(shipments.c.id == shipment_id))

    async def list(
        self, user_id: str, page: int = 1, page_size: int = 20
    ) -> tuple[list[Shipment], int]:
        stmt = (
            select(shipments)
            .where(shipments.c.user_id == user_id)
            .order_by(shipments.c.id.desc())
            .limit(page_size)
            .offset((page - 1) * page_size)
        )
        rows = (await self._session.execute(stmt)).all()
        total = (
            await self._session.execute(
                select(func.count()).select_from(shipments).where(shipments.c.user_id == user_id)
            )
        ).scalar_one()
        return [_from_row(row._mapping) for row in rows], total
