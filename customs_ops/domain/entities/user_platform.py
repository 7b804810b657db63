"""Entidad UserPlatform - configuración de un usuario para una plataforma de venta."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from customs_ops.domain.errors import ValidationError

# Campos que el usuario puede modificar después de crear el registro
EDITABLE_FIELDS = ("platform_url", "seller_id", "is_enabled", "notes")


@dataclass
class UserPlatform:
    """
    Plataforma habilitada por un usuario.

    Hay a lo sumo un registro por (user_id, platform_id); `seller_id` es el
    vendedor por defecto que se usa al preparar manifiestos de esa plataforma.
    """

    id: int | None = None
    user_id: str = ""
    platform_id: str = ""
    platform_url: str | None = None
    is_enabled: bool = True
    seller_id: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def apply_changes(self, changes: dict[str, Any], now: datetime) -> None:
        """Aplica solo los campos presentes; `is_enabled` debe ser booleano."""
        if "is_enabled" in changes and not isinstance(changes["is_enabled"], bool):
            raise ValidationError("is_enabled", "is_enabled must be a boolean")
        for name in EDITABLE_FIELDS:
            if name in changes:
                setattr(self, name, changes[name])
        self.updated_at = now

    @classmethod
    def create(
        cls,
        user_id: str,
        platform_id: str,
        now: datetime,
        platform_url: str | None = None,
        seller_id: str | None = None,
        is_enabled: bool | None = None,
        notes: str | None = None,
    ) -> "UserPlatform":
        platform_id = (platform_id or "").strip()
        if not platform_id:
            raise ValidationError("platform_id", "Platform ID is required")
        return cls(
            user_id=user_id,
            platform_id=platform_id,
            platform_url=platform_url,
            seller_id=seller_id,
            is_enabled=True if is_enabled is None else is_enabled,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
