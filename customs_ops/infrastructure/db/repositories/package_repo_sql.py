from __future__ import annotations

from dataclasses import asdict
from typing import Any

from sqlalchemy import func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from customs_ops.application.interfaces.package_repo import PackageRepo
from customs_ops.domain.entities.package import AuditStatus, Package, PackageStatus
from customs_ops.infrastructure.db.repositories._rows import as_utc
from customs_ops.infrastructure.db.tables import packages

_DATETIME_FIELDS = ("screened_at", "duty_paid_at", "corrected_at", "created_at", "updated_at")


def _to_row(package: Package) -> dict[str, Any]:
    row = asdict(package)
    row.pop("id")
    row["status"] = package.status.value
    row["audit_status"] = package.audit_status.value if package.audit_status else None
    return row


def _from_row(data) -> Package:
    values = dict(data)
    values["status"] = PackageStatus(values["status"])
    if values["audit_status"]:
        values["audit_status"] = AuditStatus(values["audit_status"])
    values["shipper"] = values["shipper"] or {}
    values["consignee"] = values["consignee"] or {}
    values["screening_request"] = values["screening_request"] or {}
    for name in _DATETIME_FIELDS:
        values[name] = as_utc(values[name])
    return Package(**values)


class PackageRepoSQL(PackageRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, package: Package) -> Package:
        result = await self._session.execute(insert(packages).values(**_to_row(package)))
        package.id = result.inserted_primary_key[0]
        return package

    async def get(self, package_id: int, user_id: str) -> Package | None:
        stmt = select(packages).where(packages.c.id == package_id, packages.c.user_id == user_id)
        row = (await self._session.execute(stmt)).first()
        return _from_row(row._mapping) if row else None

    async def get_many(self, package_ids: list[int], user_id: str) -> list[Package]:
        if not package_ids:
            return []
        stmt = (
            select(packages)
            .where(packages.c.id.in_(package_ids), packages.c.user_id == user_id)
            .order_by(packages.c.id)
        )
        rows = (await self._session.execute(stmt)).all()
        return [_from_row(row._mapping) for row in rows]

    async def save(self, package: Package) -> None:
        stmt = update(packages).where(packages.c.id == package.id).values(**_to_row(package))
        await self._session.execute(stmt)

    async def list(
        self,
        user_id: str,
        status: str | None = None,
        upload_id: int | None = None,
        shipment_id: int | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Package], int]:
        conditions = [packages.c.user_id == user_id]
        if status:
            conditions.append(packages.c.status == status)
        if upload_id is not None:
            conditions.append(packages.c.upload_id == upload_id)
        if shipment_id is not None:
            conditions.append(packages.c.shipment_id == shipment_id)

        stmt = select(packages).where(*conditions).order_by(packages.c.id.desc()).limit(limit).offset(offset)
        rows = (await self._session.execute(stmt)).all()
        total = (
            await self._session.execute(select(func.count()).select_from(packages).where(*conditions))
        ).scalar_one()
        return [_from_row(row._mapping) for row in rows], total

    async def list_matching(
        self,
        user_id: str,
        upload_id: int | None = None,
        shipment_id: int | None = None,
    ) -> list[Package]:
        conditions = [packages.c.user_id == user_id]
        if upload_id is not None:
            conditions.append(packages.c.upload_id == upload_id)
        if shipment_id is not None:
            conditions.append(packages.c.shipment_id == shipment_id)
        stmt = select(packages).where(*conditions).order_by(packages.c.id.desc())
        rows = (await self._session.execute(stmt)).all()
        return [_from_row(row._mapping) for row in rows]

    async def list_by_shipment(self, shipment_id: int) -> list[Package]:
        stmt = select(packages).where(packages.c.shipment_id == shipment_id).order_by(packages.c.id)
        rows = (await self._session.execute(stmt)).all()
        return [_from_row(row._mapping) for row in rows]

    async def unlink_shipment(self, shipment_id: int) -> int:
        stmt = update(packages).where(packages.c.shipment_id == shipment_id).values(shipment_id=None)
        result = await self._session.execute(stmt)
        return result.rowcount or 0
