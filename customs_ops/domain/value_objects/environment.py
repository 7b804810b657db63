"""Value Object Environment - ambiente del proveedor de screening."""

from enum import Enum


class Environment(str, Enum):
    """Ambientes soportados por la API del proveedor."""

    SANDBOX = "sandbox"
    PRODUCTION = "production"
