"""Queries on the calendar events. Business rules live in `utils_calendar`."""

import uuid
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from framehouse.core.projects import models_projects
from framehouse.modules.calendar import models_calendar
from framehouse.modules.calendar.types_calendar import CalendarEventType


async def get_event(
    db: AsyncSession,
    event_id: uuid.UUID,
) -> models_calendar.CalendarEvent | None:
    """Retrieve the event corresponding to `event_id` from the database."""
    result = await db.execute(
        select(models_calendar.CalendarEvent)
        .where(models_calendar.CalendarEvent.id == event_id)
        # The event may already be in the session with stale attributes after a bulk update
        .execution_options(populate_existing=True),
    )
    return result.scalars().first()


async def get_events(
    db: AsyncSession,
    start_at_from: datetime | None = None,
    start_at_before: datetime | None = None,
    event_type: CalendarEventType | None = None,
    project_id: uuid.UUID | None = None,
    visible_to_client_id: str | None = None,
) -> Sequence[models_calendar.CalendarEvent]:
    """
    Return the events starting in `[start_at_from, start_at_before)`.

    If `visible_to_client_id` is given, only the events of this client, the events of its projects
    and the available slots are returned.
    """
    query = select(models_calendar.CalendarEvent).outerjoin(
        models_projects.Project,
        models_calendar.CalendarEvent.project_id == models_projects.Project.id,
    )
    if start_at_from is not None:
        query = query.where(models_calendar.CalendarEvent.start_at >= start_at_from)
    if start_at_before is not None:
        query = query.where(models_calendar.CalendarEvent.start_at < start_at_before)
    if event_type is not None:
        query = query.where(models_calendar.CalendarEvent.event_type == event_type)
    if project_id is not None:
        query = query.where(models_calendar.CalendarEvent.project_id == project_id)
    if visible_to_client_id is not None:
        query = query.where(
            or_(
                models_projects.Project.client_id == visible_to_client_id,
                models_calendar.CalendarEvent.client_id == visible_to_client_id,
                models_calendar.CalendarEvent.is_available_slot.is_(True),
            ),
        )

    result = await db.execute(
        query.order_by(
            models_calendar.CalendarEvent.start_at,
            models_calendar.CalendarEvent.id,
        ),
    )
    return result.scalars().all()


async def get_unbooked_slots(
    db: AsyncSession,
    start_at_from: datetime,
    end_at_until: datetime,
) -> Sequence[models_calendar.CalendarEvent]:
    """Return the available slots which are not booked and fit in `[start_at_from, end_at_until]`."""
    result = await db.execute(
        select(models_calendar.CalendarEvent)
        .where(
            models_calendar.CalendarEvent.is_available_slot.is_(True),
            models_calendar.CalendarEvent.is_booked.is_(False),
            models_calendar.CalendarEvent.start_at >= start_at_from,
            models_calendar.CalendarEvent.end_at <= end_at_until,
        )
        .order_by(
            models_calendar.CalendarEvent.start_at,
            models_calendar.CalendarEvent.id,
        ),
    )
    return result.scalars().all()


async def get_committed_events_overlapping(
    db: AsyncSession,
    start_at: datetime,
    end_at: datetime,
) -> Sequence[models_calendar.CalendarEvent]:
    """
    Return the committed events (not available slots) sharing at least an instant with `[start_at, end_at)`.
    """
    result = await db.execute(
        select(models_calendar.CalendarEvent)
        .where(
            models_calendar.CalendarEvent.is_available_slot.is_(False),
            models_calendar.CalendarEvent.start_at < end_at,
            models_calendar.CalendarEvent.end_at > start_at,
        )
        .order_by(models_calendar.CalendarEvent.start_at),
    )
    return result.scalars().all()


async def add_event(
    db: AsyncSession,
    event: models_calendar.CalendarEvent,
) -> None:
    db.add(event)
    await db.flush()


async def edit_event(
    db: AsyncSession,
    event_id: uuid.UUID,
    values: dict[str, Any],
) -> None:
    await db.execute(
        update(models_calendar.CalendarEvent)
        .where(models_calendar.CalendarEvent.id == event_id)
        .values(**values),
    )
    await db.flush()


async def mark_slot_as_booked(
    db: AsyncSession,
    slot_id: uuid.UUID,
    booked_by: str,
    project_id: uuid.UUID | None,
    updated_at: datetime,
) -> bool:
    """
    Book the slot if, and only if, it is still an unbooked available slot.

    The check and the write are a single conditional UPDATE: of two concurrent calls on the same slot, only one
    can match the `is_booked = False` condition. Return False if the slot was not booked by this call.
    """
    values: dict[str, Any] = {
        "is_booked": True,
        "booked_by": booked_by,
        "updated_at": updated_at,
    }
    # A booking never clears the project already attached to the slot
    if project_id is not None:
        values["project_id"] = project_id

    result = await db.execute(
        update(models_calendar.CalendarEvent)
        .where(
            models_calendar.CalendarEvent.id == slot_id,
            models_calendar.CalendarEvent.is_available_slot.is_(True),
            models_calendar.CalendarEvent.is_booked.is_(False),
        )
        .values(**values)
        .execution_options(synchronize_session=False),
    )
    await db.flush()
    return result.rowcount == 1


async def delete_event(
    db: AsyncSession,
    event_id: uuid.UUID,
) -> None:
    await db.execute(
        delete(models_calendar.CalendarEvent).where(
            models_calendar.CalendarEvent.id == event_id,
        ),
    )
    await db.flush()
