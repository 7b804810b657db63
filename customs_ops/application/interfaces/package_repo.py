from __future__ import annotations

from customs_ops.domain.entities.package import Package


class PackageRepo:
    async def add(self, package: Package) -> Package:
        raise NotImplementedError

    async def get(self, package_id: int, user_id: str) -> Package | None:
        raise NotImplementedError

    async def get_many(self, package_ids: list[int], user_id: str) -> list[Package]:
        raise NotImplementedError

    async def save(self, package: Package) -> None:
        raise NotImplementedError

    async def list(
        self,
        user_id: str,
        status: str | None = None,
        upload_id: int | None = None,
        shipment_id: int | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Package], int]:
        raise NotImplementedError

    async def list_matching(
        self,
        user_id: str,
        upload_id: int | None = None,
        shipment_id: int | None = None,
    ) -> list[Package]:
        """Every match, newest first. Used by exports, which are not paged."""
        raise NotImplementedError

    async def list_by_shipment(self, shipment_id: int) -> list[Package]:
        raise NotImplementedError

    async def unlink_shipment(self, shipment_id: int) -> int:
        raise NotImplementedError
