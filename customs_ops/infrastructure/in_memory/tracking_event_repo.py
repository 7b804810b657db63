import copy
from datetime import datetime, timezone

from customs_ops.application.interfaces.tracking_event_repo import TrackingEventRepo
from customs_ops.domain.entities.tracking_event import TrackingEvent

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class InMemoryTrackingEventRepo(TrackingEventRepo):
    def __init__(self) -> None:
        self._events: dict[tuple, TrackingEvent] = {}
        self._next_id = 1

    async def upsert_many(self, events: list[TrackingEvent]) -> int:
        inserted = 0
        for event in events:
            if event.natural_key in self._events:
                continue
            event.id = self._next_id
            self._events[event.natural_key] = copy.deepcopy(event)
            self._next_id += 1
            inserted += 1
        return inserted

    async def list_for_entity(self, entity_type: str, entity_id: int) -> list[TrackingEvent]:
        matches = [
            e
            for e in self._events.values()
            if e.entity_type.value == entity_type and e.entity_id == entity_id
        ]
        matches.sort(key=lambda e: e.event_time or _EPOCH, reverse=True)
        return [copy.deepcopy(e) for e in matches]
