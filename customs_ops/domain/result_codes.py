"""
Traducción de códigos numéricos del proveedor a estados del dominio.

Cada código es un enum cerrado. Un código desconocido se registra como
warning y cae en el valor por defecto documentado de cada traducción.
"""

import logging
from enum import IntEnum

from customs_ops.domain.entities.package import AuditStatus, PackageStatus
from customs_ops.domain.entities.shipment import ShipmentStatus

logger = logging.getLogger(__name__)


class ScreeningCode(IntEnum):
    ACCEPTED = 1
    REJECTED = 2
    INCONCLUSIVE = 3
    AUDIT = 4


class AuditCode(IntEnum):
    PASSED = 1
    FAILED = 2
    PENDING = 3


class VerificationCode(IntEnum):
    ACCEPTED = 1
    REJECTED = 2


def _parse(enum_cls, code):
    try:
        return enum_cls(code)
    except (TypeError, ValueError):
        logger.warning(
            "Unknown provider result code",
            extra={"code_type": enum_cls.__name__, "code": code},
        )
        return None


def package_status_for_screening(code: int | None) -> PackageStatus:
    """1→accepted, 2→rejected, 3→inconclusive, 4→audit_required, otro→pending."""
    screening = _parse(ScreeningCode, code)
    if screening is ScreeningCode.ACCEPTED:
        return PackageStatus.ACCEPTED
    if screening is ScreeningCode.REJECTED:
        return PackageStatus.REJECTED
    if screening is ScreeningCode.INCONCLUSIVE:
        return PackageStatus.INCONCLUSIVE
    if screening is ScreeningCode.AUDIT:
        return PackageStatus.AUDIT_REQUIRED
    return PackageStatus.PENDING


def package_status_for_audit(code: int | None) -> PackageStatus:
    """1→accepted, 2→rejected, otro→audit_submitted."""
    audit = _parse(AuditCode, code)
    if audit is AuditCode.PASSED:
        return PackageStatus.ACCEPTED
    if audit is AuditCode.FAILED:
        return PackageStatus.REJECTED
    return PackageStatus.AUDIT_SUBMITTED


def audit_status_for(code: int | None) -> AuditStatus:
    audit = _parse(AuditCode, code)
    if audit is AuditCode.PASSED:
        return AuditStatus.PASSED
    if audit is AuditCode.FAILED:
        return AuditStatus.FAILED
    return AuditStatus.PENDING


def shipment_status_for_verification(code: int | None) -> ShipmentStatus:
    """Solo el código 1 verifica; cualquier otro rechaza."""
    if _parse(VerificationCode, code) is VerificationCode.ACCEPTED:
        return ShipmentStatus.VERIFIED
    return ShipmentStatus.REJECTED
