from customs_ops.domain.entities.tracking_event import TrackingEvent


class TrackingEventRepo:
    async def upsert_many(self, events: list[TrackingEvent]) -> int:
        """Insert events, ignoring duplicates of the natural key. Returns inserted count."""
        raise NotImplementedError

    async def list_for_entity(self, entity_type: str, entity_id: int) -> list[TrackingEvent]:
        """Events for one entity, newest first."""
        raise NotImplementedError
