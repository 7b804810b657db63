from dataclasses import asdict

from sqlalchemy import insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from customs_ops.application.interfaces.tracking_event_repo import TrackingEventRepo
from customs_ops.domain.entities.tracking_event import TrackedEntity, TrackingEvent
from customs_ops.infrastructure.db.repositories._rows import as_utc
from customs_ops.infrastructure.db.tables import tracking_events

_NATURAL_KEY = ["entity_type", "entity_id", "event_type", "event_time"]


class TrackingEventRepoSQL(TrackingEventRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def _insert_ignore(self):
        dialect = self._session.bind.dialect.name
        if dialect == "postgresql":
            return postgresql.insert(tracking_events).on_conflict_do_nothing(index_elements=_NATURAL_KEY)
        if dialect == "sqlite":
            return sqlite.insert(tracking_events).on_conflict_do_nothing(index_elements=_NATURAL_KEY)
        # MySQL / MariaDB
        return insert(tracking_events).prefix_with("IGNORE")

    async def upsert_many(self, events: list[TrackingEvent]) -> int:
        inserted = 0
        for event in events:
            row = asdict(event)
            row.pop("id")
            row["entity_type"] = event.entity_type.value
            result = await self._session.execute(self._insert_ignore().values(**row))
            inserted += result.rowcount or 0
        return inserted

    async def list_for_entity(self, entity_type: str, entity_id: int) -> list[TrackingEvent]:
        stmt = (
            select(tracking_events)
            .where(
                tracking_events.c.entity_type == entity_type,
                tracking_events.c.entity_id == entity_id,
            )
            .order_by(tracking_events.c.event_time.desc())
        )
        events = []
        for row in (await self._session.execute(stmt)).all():
            values = dict(row._mapping)
            values["entity_type"] = TrackedEntity(values["entity_type"])
            values["event_time"] = as_utc(values["event_time"])
            values["fetched_at"] = as_utc(values["fetched_at"])
            events.append(TrackingEvent(**values))
        return events
