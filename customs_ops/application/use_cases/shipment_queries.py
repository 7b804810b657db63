import base64
import binascii
import logging
from dataclasses import dataclass

from customs_ops.application.interfaces.package_repo import PackageRepo
from customs_ops.application.interfaces.shipment_repo import ShipmentRepo
from customs_ops.application.interfaces.transaction_manager import TransactionManager
from customs_ops.domain.entities.package import Package
from customs_ops.domain.entities.shipment import Shipment
from customs_ops.domain.errors import DocumentNotFoundError, ShipmentNotFoundError

MAX_PAGE_SIZE = 50


@dataclass
class ShipmentDocument:
    content: bytes
    media_type: str
    filename: str


class ListShipmentsUseCase:
    def __init__(self, shipment_repo: ShipmentRepo) -> None:
        self._shipment_repo = shipment_repo

    async def execute(self, user_id: str, page: int = 1, page_size: int = 20) -> tuple[list[Shipment], int]:
        page = max(page, 1)
        page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
        return await self._shipment_repo.list(user_id, page=page, page_size=page_size)


class GetShipmentUseCase:
    def __init__(self, shipment_repo: ShipmentRepo, package_repo: PackageRepo) -> None:
        self._shipment_repo = shipment_repo
        self._package_repo = package_repo

    async def execute(self, shipment_id: int, user_id: str) -> tuple[Shipment, list[Package]]:
        shipment = await self._shipment_repo.get(shipment_id, user_id)
        if not shipment:
            raise ShipmentNotFoundError(shipment_id)
        packages = await self._package_repo.list_by_shipment(shipment.id)
        return shipment, packages


class GetShipmentDocumentUseCase:
    """Decodes the verification document stored on a verified shipment."""

    def __init__(self, shipment_repo: ShipmentRepo) -> None:
        self._shipment_repo = shipment_repo
        self._logger = logging.getLogger(__name__)

    async def execute(self, shipment_id: int, user_id: str) -> ShipmentDocument:
        shipment = await self._shipment_repo.get(shipment_id, user_id)
        if not shipment:
            raise ShipmentNotFoundError(shipment_id)
        if not shipment.verification_document or not shipment.verification_document_type:
            raise DocumentNotFoundError(shipment_id)

        try:
            content = base64.b64decode(shipment.verification_document, validate=True)
        except (binascii.Error, ValueError) as exc:
            self._logger.error(
                "Stored verification document is not valid base64",
                extra={"shipment_id": shipment.id},
            )
            raise DocumentNotFoundError(shipment_id) from exc

        doc_type = shipment.verification_document_type
        return ShipmentDocument(
            content=content,
            media_type=doc_type.media_type,
            filename=f"cbp-document-{shipment.external_id}.{doc_type.extension}",
        )


class DeleteShipmentUseCase:
    def __init__(
        self,
        shipment_repo: ShipmentRepo,
        package_repo: PackageRepo,
        transaction_manager: TransactionManager,
    ) -> None:
        self._shipment_repo = shipment_repo
        self._package_repo = package_repo
        self._transaction_manager = transaction_manager
        self._logger = logging.getLogger(__name__)

    async def execute(self, shipment_id: int, user_id: str) -> None:
        async with self._transaction_manager.start():
            shipment = await self._shipment_repo.get(shipment_id, user_id)
            if not shipment:
                raise ShipmentNotFoundError(shipment_id)
            shipment.ensure_deletable()
            unlinked = await self._package_repo.unlink_shipment(shipment.id)
            await self._shipment_repo.delete(shipment.id)

        self._logger.info(
            "Shipment deleted", extra={"shipment_id": shipment_id, "unlinked_packages": unlinked}
        )
