from __future__ import annotations

import copy

from customs_ops.application.interfaces.package_repo import PackageRepo
from customs_ops.domain.entities.package import Package


class InMemoryPackageRepo(PackageRepo):
    def __init__(self) -> None:
        self._packages: dict[int, Package] = {}
        self._next_id = 1

    async def add(self, package: Package) -> Package:
        package.id = self._next_id
        self._packages[self._next_id] = copy.deepcopy(package)
        self._next_id += 1
        return package

    async def get(self, package_id: int, user_id: str) -> Package | None:
        package = self._packages.get(package_id)
        if not package or package.user_id != user_id:
            return None
        return copy.deepcopy(package)

    async def get_many(self, package_ids: list[int], user_id: str) -> list[Package]:
        return [
            copy.deepcopy(p)
            for pid in dict.fromkeys(package_ids)
            if (p := self._packages.get(pid)) and p.user_id == user_id
        ]

    async def save(self, package: Package) -> None:
        self._packages[package.id] = copy.deepcopy(package)

    async def list(
        self,
        user_id: str,
        status: str | None = None,
        upload_id: int | None = None,
        shipment_id: int | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Package], int]:
        matches = [
            p
            for p in self._packages.values()
            if p.user_id == user_id
            and (status is None or p.status.value == status)
            and (upload_id is None or p.upload_id == upload_id)
            and (shipment_id is None or p.shipment_id == shipment_id)
        ]
        matches.sort(key=lambda p: p.id, reverse=True)
        return [copy.deepcopy(p) for p in matches[offset : offset + limit]], len(matches)

    async def list_matching(
        self,
        user_id: str,
        upload_id: int | None = None,
        shipment_id: int | None = None,
    ) -> list[Package]:
        packages, _ = await self.list(
            user_id, upload_id=upload_id, shipment_id=shipment_id, limit=len(self._packages)
        )
        return packages

    async def list_by_shipment(self, shipment_id: int) -> list[Package]:
        return [copy.deepcopy(p) for p in self._packages.values() if p.shipment_id == shipment_id]

    async def unlink_shipment(self, shipment_id: int) -> int:
        count = 0
        for package in self._packages.values():
            if package.shipment_id == shipment_id:
                package.unlink_shipment()
                count += 1
        return count
