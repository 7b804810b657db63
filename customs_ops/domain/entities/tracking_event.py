"""Entidad TrackingEvent - evento de rastreo reportado por el proveedor."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class TrackedEntity(str, Enum):
    PACKAGE = "package"
    SHIPMENT = "shipment"


@dataclass
class TrackingEvent:
    """
    Evento de rastreo.

    La clave natural (entity_type, entity_id, event_type, event_time) hace
    idempotente la ingesta: repetir un evento no crea duplicados.
    """

    id: int | None = None
    user_id: str = ""
    entity_type: TrackedEntity = TrackedEntity.PACKAGE
    entity_id: int = 0
    provider_entity_id: str | None = None
    event_type: str = ""
    event_description: str | None = None
    event_time: datetime | None = None
    event_data: dict[str, Any] | None = None
    environment: str = "sandbox"
    fetched_at: datetime | None = None

    @property
    def natural_key(self) -> tuple[str, int, str, datetime | None]:
        return (self.entity_type.value, self.entity_id, self.event_type, self.event_time)
