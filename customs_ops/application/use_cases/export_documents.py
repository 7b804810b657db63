"""
CSV exports built from stored packages.

- shipment register: one row per package, laid out like a shipment
  registration request, with master bill and transport columns left blank
- packing list: header block, one row per package, total row
- commercial invoice: header block, one line per product in each package's
  screening request, total row

All three are scoped to the caller and fail with NO_PACKAGES_FOUND when the
filter matches nothing.
"""

import csv
import io
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from customs_ops.application.interfaces.clock import Clock
from customs_ops.application.interfaces.package_repo import PackageRepo
from customs_ops.domain.entities.package import Package
from customs_ops.domain.errors import NoPackagesToExportError

logger = logging.getLogger(__name__)

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"

SHIPMENT_REGISTER_COLUMNS = [
    "shipment_external_id",
    "master_bill_prefix",
    "master_bill_serial_number",
    "originator_code",
    "entry_type",
    "shipper_name",
    "shipper_line1",
    "shipper_line2",
    "shipper_city",
    "shipper_state",
    "shipper_postal_code",
    "shipper_country",
    "shipper_phone",
    "shipper_email",
    "consignee_name",
    "consignee_line1",
    "consignee_line2",
    "consignee_city",
    "consignee_state",
    "consignee_postal_code",
    "consignee_country",
    "consignee_phone",
    "consignee_email",
    "transport_mode",
    "port_of_entry",
    "port_of_origin",
    "port_of_arrival",
    "carrier_name",
    "carrier_code",
    "line_number",
    "shipping_date",
    "scheduled_arrival_date",
    "firms_code",
    "terminal_operator",
    "package_id",
]

PACKING_LIST_COLUMNS = [
    "Package #",
    "House Bill",
    "External ID",
    "Barcode",
    "Platform",
    "Weight",
    "Origin",
    "Destination",
    "Consignee",
    "Address",
    "City",
    "State",
    "Postal",
    "Status",
    "Provider ID",
]

INVOICE_LINE_COLUMNS = [
    "Item #",
    "SKU",
    "Description",
    "HS Code",
    "Origin",
    "Material",
    "Qty",
    "Unit Price (USD)",
    "Total Value (USD)",
]

# Address keys as sent to the provider ("from"/"to" blocks)
_ADDRESS_KEYS = (
    ("name", "name"),
    ("line1", "line1"),
    ("line2", "line2"),
    ("city", "city"),
    ("state", "state"),
    ("postal_code", "postalCode"),
    ("country", "country"),
    ("phone", "phone"),
    ("email", "email"),
)

CENT = Decimal("0.01")


@dataclass
class ExportFile:
    content: str
    filename: str
    media_type: str = CSV_MEDIA_TYPE


def _address_columns(prefix: str, address: dict[str, Any]) -> dict[str, str]:
    return {f"{prefix}_{column}": str(address.get(key) or "") for column, key in _ADDRESS_KEYS}


def _one_line_address(address: dict[str, Any]) -> str:
    locality = ", ".join(
        str(address[key]) for key in ("city", "state", "postalCode") if address.get(key)
    )
    parts = [address.get("name"), address.get("line1"), address.get("line2"), locality, address.get("country")]
    return ", ".join(str(part) for part in parts if part)


def _weight_label(package: Package) -> str:
    if package.weight_value is None:
        return ""
    unit = "kg" if package.weight_unit == "K" else "lbs"
    return f"{package.weight_value} {unit}"


def _decimal(value: Any) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return amount if amount.is_finite() else Decimal("0")


def _quantity(value: Any) -> int:
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        return 1
    return quantity if quantity > 0 else 1


class _PackageExport:
    def __init__(self, package_repo: PackageRepo, clock: Clock) -> None:
        self._package_repo = package_repo
        self._clock = clock

    async def _packages(
        self, user_id: str, upload_id: int | None = None, shipment_id: int | None = None
    ) -> list[Package]:
        packages = await self._package_repo.list_matching(user_id, upload_id=upload_id, shipment_id=shipment_id)
        if not packages:
            raise NoPackagesToExportError()
        return packages

    def _today(self) -> str:
        return self._clock.now().date().isoformat()


class ExportShipmentRegisterUseCase(_PackageExport):
    async def execute(self, user_id: str, upload_id: int | None = None) -> ExportFile:
        packages = await self._packages(user_id, upload_id=upload_id)

        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=SHIPMENT_REGISTER_COLUMNS, restval="", lineterminator="\n")
        writer.writeheader()
        for package in packages:
            writer.writerow(
                {
                    "shipment_external_id": package.external_id,
                    **_address_columns("shipper", package.shipper),
                    **_address_columns("consignee", package.consignee),
                    "package_id": package.provider_package_id or "",
                }
            )

        logger.info("Shipment register exported", extra={"package_count": len(packages), "upload_id": upload_id})
        return ExportFile(content=buffer.getvalue(), filename=f"shipment_register_{self._today()}.csv")


class ExportPackingListUseCase(_PackageExport):
    async def execute(
        self, user_id: str, upload_id: int | None = None, shipment_id: int | None = None
    ) -> ExportFile:
        packages = await self._packages(user_id, upload_id=upload_id, shipment_id=shipment_id)
        now = self._clock.now()
        shipment_label = str(shipment_id) if shipment_id is not None else f"SHIP-{now:%Y%m%d%H%M%S}"
        first = packages[0]

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerows(
            [
                ["PACKING LIST"],
                ["Shipment ID:", shipment_label],
                ["Date:", self._today()],
                ["Total Packages:", len(packages)],
                ["FROM:", _one_line_address(first.shipper)],
                ["TO:", _one_line_address(first.consignee)],
                [],
                PACKING_LIST_COLUMNS,
            ]
        )

        total_weight = Decimal("0")
        for number, package in enumerate(packages, start=1):
            total_weight += package.weight_value or 0
            writer.writerow(
                [
                    number,
                    package.house_bill_number or "",
                    package.external_id,
                    package.barcode or "",
                    package.platform_id or "",
                    _weight_label(package),
                    package.export_country or "",
                    package.destination_country or "",
                    package.consignee.get("name", ""),
                    package.consignee.get("line1", ""),
                    package.consignee.get("city", ""),
                    package.consignee.get("state", ""),
                    package.consignee.get("postalCode", ""),
                    package.screening_status or package.status.value,
                    package.provider_package_id or "",
                ]
            )
        writer.writerow(["TOTAL", "", "", "", "", str(total_weight)])

        return ExportFile(content=buffer.getvalue(), filename=f"Packing_List_{self._today()}.csv")


class ExportCommercialInvoiceUseCase(_PackageExport):
    async def execute(
        self,
        user_id: str,
        upload_id: int | None = None,
        incoterms: str = "DDP",
        currency: str = "USD",
    ) -> ExportFile:
        packages = await self._packages(user_id, upload_id=upload_id)
        now = self._clock.now()
        first = packages[0]

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerows(
            [
                ["Document Type", "PROFORMA INVOICE"],
                ["Invoice Number", f"INV-{now:%Y%m%d%H%M%S}"],
                ["Date", self._today()],
                ["Incoterms", incoterms],
                ["Currency", currency],
                ["SHIPPER (Exporter)", _one_line_address(first.shipper)],
                ["Shipper Phone", first.shipper.get("phone") or ""],
                ["Consigned To:", _one_line_address(first.consignee)],
                ["Consignee Phone", first.consignee.get("phone") or ""],
                [],
                ["LINE ITEMS"],
                INVOICE_LINE_COLUMNS,
            ]
        )

        item_count = 0
        total_quantity = 0
        grand_total = Decimal("0")
        for package in packages:
            for line in package.screening_request.get("products") or []:
                if not isinstance(line, dict):
                    continue
                # Provider format nests details under "product"; flat lines are accepted too
                details = line.get("product") if isinstance(line.get("product"), dict) else line
                quantity = _quantity(line.get("quantity"))
                declared = line.get("declaredValue", details.get("price", 0))
                unit_price = _decimal(declared).quantize(CENT, rounding=ROUND_HALF_UP)
                line_total = (unit_price * quantity).quantize(CENT, rounding=ROUND_HALF_UP)

                first_item = item_count + 1
                item_count += quantity
                writer.writerow(
                    [
                        f"{first_item}-{item_count}" if quantity > 1 else str(first_item),
                        details.get("sku") or "",
                        line.get("declaredName") or details.get("name") or details.get("description") or "",
                        details.get("hts") or details.get("hsCode") or "",
                        details.get("originCountry") or package.export_country or "",
                        str(details.get("description") or "")[:100],
                        quantity,
                        str(unit_price),
                        str(line_total),
                    ]
                )
                total_quantity += quantity
                grand_total += line_total

        writer.writerow(["", "", "", "", "", "", total_quantity, "", str(grand_total)])

        return ExportFile(content=buffer.getvalue(), filename=f"Commercial_Invoice_{self._today()}.csv")
