"""Operaciones de la API del proveedor, usadas como contexto de fallas."""

from enum import Enum


class ProviderEndpoint(str, Enum):
    PLATFORMS = "/v1/platform"
    PACKAGE_SCREEN = "/v1/package/screen"
    PACKAGE_AUDIT = "/v1/package/audit"
    PACKAGE_TRACKING = "/v1/package/tracking"
    DUTY_PAY = "/v1/duty/pay"
    SHIPMENT_REGISTER = "/v1/shipment/register"
    SHIPMENT_VERIFY = "/v1/shipment/verify"
    SHIPMENT_TRACKING = "/v1/shipment/tracking"


# Solo el screening se puede repetir sin intervención humana
AUTO_RETRYABLE_ENDPOINTS = frozenset({ProviderEndpoint.PACKAGE_SCREEN.value})


def is_auto_retryable(endpoint: str) -> bool:
    return endpoint in AUTO_RETRYABLE_ENDPOINTS
