from customs_ops.application.interfaces.package_repo import PackageRepo
from customs_ops.domain.entities.package import Package
from customs_ops.domain.errors import PackageNotFoundError


class ListPackagesUseCase:
    def __init__(self, package_repo: PackageRepo) -> None:
        self._package_repo = package_repo

    async def execute(
        self,
        user_id: str,
        status: str | None = None,
        upload_id: int | None = None,
        shipment_id: int | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Package], int]:
        return await self._package_repo.list(
            user_id,
            status=status,
            upload_id=upload_id,
            shipment_id=shipment_id,
            limit=limit,
            offset=offset,
        )


class GetPackageUseCase:
    def __init__(self, package_repo: PackageRepo) -> None:
        self._package_repo = package_repo

    async def execute(self, package_id: int, user_id: str) -> Package:
        package = await self._package_repo.get(package_id, user_id)
        if not package:
            raise PackageNotFoundError(package_id)
        return package
