"""
Scheduling engine: slot generation, conflict detection and booking of available slots.

Conflict detection has two distinct policies built on `intervals_overlap`:
the slot generator silently skips a conflicting candidate (`should_skip_slot`),
while a manual creation is refused (`raise_on_conflict`).
"""

import logging
import uuid
from collections.abc import Iterator, Sequence
from datetime import UTC, date, datetime, time, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from framehouse.core.notification.notification_types import NotificationType
from framehouse.core.notification.schemas_notification import Message
from framehouse.core.notification.utils_notification import NotificationTool
from framehouse.core.projects import cruds_projects
from framehouse.core.users import cruds_users, models_users
from framehouse.modules.calendar import (
    cruds_calendar,
    models_calendar,
    schemas_calendar,
)
from framehouse.modules.calendar.types_calendar import CalendarEventType
from framehouse.types.exceptions import (
    CalendarForbiddenError,
    CalendarValidationError,
    EventConflictError,
    EventNotFoundError,
    SlotAlreadyBookedError,
)

framehouse_calendar_logger = logging.getLogger("framehouse.calendar")

AVAILABLE_SLOT_TITLE = "Available for Booking"
DEFAULT_START_TIME = time(9, 0)
DEFAULT_END_TIME = time(17, 0)

# Saturday and Sunday, see `date.weekday`
WEEKEND_DAYS = (5, 6)


def intervals_overlap(
    a_start: datetime,
    a_end: datetime,
    b_start: datetime,
    b_end: datetime,
) -> bool:
    """
    Half-open intervals `[a_start, a_end)` and `[b_start, b_end)` overlap if they share at least an instant.
    Touching intervals do not overlap.
    """
    return a_start < b_end and a_end > b_start


def should_skip_slot(
    slot_start: datetime,
    slot_end: datetime,
    committed_events: Sequence[models_calendar.CalendarEvent],
) -> bool:
    """Generation policy: a candidate slot colliding with a committed event is not created."""
    return any(
        intervals_overlap(slot_start, slot_end, event.start_at, event.end_at)
        for event in committed_events
        if not event.is_available_slot
    )


async def raise_on_conflict(
    db: AsyncSession,
    start_at: datetime,
    end_at: datetime,
) -> None:
    """Manual creation policy: refuse an event colliding with a committed event."""
    candidates = await cruds_calendar.get_committed_events_overlapping(
        db=db,
        start_at=start_at,
        end_at=end_at,
    )
    for event in candidates:
        if intervals_overlap(start_at, end_at, event.start_at, event.end_at):
            raise EventConflictError(
                f"Time slot conflicts with existing event {event.title} ({event.start_at:%Y-%m-%d %H:%M} - {event.end_at:%H:%M})",
            )


def iter_days(start_date: date, end_date: date) -> Iterator[date]:
    """Every calendar day from `start_date` to `end_date` inclusive. Nothing if the range is empty."""
    day = start_date
    while day <= end_date:
        yield day
        if day == date.max:
            return
        day += timedelta(days=1)


def iter_candidate_slots(
    day: date,
    start_time: time,
    end_time: time,
    slot_duration: timedelta,
) -> Iterator[tuple[datetime, datetime]]:
    """
    Carve `[start_time, end_time)` in consecutive slots of exactly `slot_duration`.
    A trailing remainder shorter than `slot_duration` is dropped.
    """
    slot_start = datetime.combine(day, start_time)
    day_end = datetime.combine(day, end_time)
    # Compared as durations, `slot_start + slot_duration` may not be a valid datetime on the last day of the calendar
    while day_end - slot_start >= slot_duration:
        slot_end = slot_start + slot_duration
        yield slot_start, slot_end
        slot_start = slot_end


def is_day_excluded(
    day: date,
    exclude_weekends: bool,
    exclude_dates: set[date],
) -> bool:
    return (exclude_weekends and day.weekday() in WEEKEND_DAYS) or day in exclude_dates


async def generate_available_slots(
    db: AsyncSession,
    generation: schemas_calendar.SlotGeneration,
) -> list[models_calendar.CalendarEvent]:
    """
    Create the available slots described by `generation` and return them.

    Committed events are loaded once for the whole range. Existing available slots are ignored:
    generating twice over the same range creates the slots twice.
    """
    start_time = generation.start_time.replace(tzinfo=None)
    end_time = generation.end_time.replace(tzinfo=None)
    slot_duration = timedelta(minutes=generation.slot_duration)
    exclude_dates = set(generation.exclude_dates)

    if generation.end_date < generation.start_date or end_time <= start_time:
        return []

    committed_events = await cruds_calendar.get_committed_events_overlapping(
        db=db,
        start_at=datetime.combine(generation.start_date, time.min),
        end_at=datetime.combine(generation.end_date, time.max),
    )

    created_slots: list[models_calendar.CalendarEvent] = []
    skipped = 0
    for day in iter_days(generation.start_date, generation.end_date):
        if is_day_excluded(day, generation.exclude_weekends, exclude_dates):
            continue
        for slot_start, slot_end in iter_candidate_slots(
            day,
            start_time,
            end_time,
            slot_duration,
        ):
            if should_skip_slot(slot_start, slot_end, committed_events):
                skipped += 1
                continue

            now = datetime.now(UTC)
            slot = models_calendar.CalendarEvent(
                id=uuid.uuid4(),
                title=AVAILABLE_SLOT_TITLE,
                start_at=slot_start,
                end_at=slot_end,
                created_at=now,
                updated_at=now,
                event_type=CalendarEventType.filming,
                is_available_slot=True,
            )
            await cruds_calendar.add_event(db=db, event=slot)
            created_slots.append(slot)

    framehouse_calendar_logger.info(
        f"Generated {len(created_slots)} available slots from {generation.start_date} to {generation.end_date} ({skipped} skipped because of a conflict)",
    )
    return created_slots


def can_user_see_event(
    user: models_users.CoreUser,
    event: models_calendar.CalendarEvent,
) -> bool:
    """Clients see their own events, the events of their projects and every available slot."""
    return (
        user.is_admin
        or event.is_available_slot
        or event.client_id == user.id
        or (event.project is not None and event.project.client_id == user.id)
    )


async def list_events(
    db: AsyncSession,
    user: models_users.CoreUser,
    start: date | None = None,
    end: date | None = None,
    event_type: CalendarEventType | None = None,
    project_id: uuid.UUID | None = None,
) -> Sequence[models_calendar.CalendarEvent]:
    """
    Return the events visible to `user`, whose start date is between `start` and `end` inclusive.
    """
    return await cruds_calendar.get_events(
        db=db,
        start_at_from=datetime.combine(start, time.min) if start else None,
        start_at_before=(
            datetime.combine(end + timedelta(days=1), time.min) if end else None
        ),
        event_type=event_type,
        project_id=project_id,
        visible_to_client_id=None if user.is_admin else user.id,
    )


async def list_available_slots(
    db: AsyncSession,
    default_window_days: int,
    start: datetime | None = None,
    end: datetime | None = None,
) -> Sequence[models_calendar.CalendarEvent]:
    """
    Return the unbooked slots fitting in `[start, end]`.

    An omitted bound defaults to now, or to `default_window_days` from now, whatever the other bound is.
    """
    now = datetime.now()  # noqa: DTZ005
    start = start or now
    end = end or now + timedelta(days=default_window_days)
    return await cruds_calendar.get_unbooked_slots(
        db=db,
        start_at_from=start,
        end_at_until=end,
    )


async def get_visible_event(
    db: AsyncSession,
    event_id: uuid.UUID,
    user: models_users.CoreUser,
) -> models_calendar.CalendarEvent:
    event = await cruds_calendar.get_event(db=db, event_id=event_id)
    if event is None:
        raise EventNotFoundError("Event not found")
    if not can_user_see_event(user, event):
        raise CalendarForbiddenError("You are not allowed to access this event")
    return event


def resolve_bounds(
    fields: schemas_calendar.CalendarEventFields,
) -> tuple[datetime | None, datetime | None]:
    """
    Compute the bounds given in a payload, either explicitly or as dates and times.

    When dates are used, the start defaults to 09:00 and the end defaults to 17:00 on `end_date`, or on `start_date`.
    """
    start_at = fields.start_datetime
    if start_at is None and fields.start_date is not None:
        start_at = datetime.combine(
            fields.start_date,
            fields.start_time or DEFAULT_START_TIME,
        )

    end_at = fields.end_datetime
    end_date = fields.end_date or fields.start_date
    if end_at is None and end_date is not None:
        end_at = datetime.combine(end_date, fields.end_time or DEFAULT_END_TIME)

    return start_at, end_at


def check_bounds(start_at: datetime, end_at: datetime) -> None:
    if end_at <= start_at:
        raise CalendarValidationError("The end of an event must be after its start")


async def check_references(
    db: AsyncSession,
    project_id: uuid.UUID | None,
    client_id: str | None,
) -> None:
    if project_id is not None and (
        await cruds_projects.get_project_by_id(db=db, project_id=project_id) is None
    ):
        raise CalendarValidationError(f"Project {project_id} does not exist")
    if client_id is not None and (
        await cruds_users.get_user_by_id(db=db, user_id=client_id) is None
    ):
        raise CalendarValidationError(f"Client {client_id} does not exist")


async def create_event(
    db: AsyncSession,
    event_create: schemas_calendar.CalendarEventCreate,
) -> models_calendar.CalendarEvent:
    """
    Create an event from an admin payload. Committed events colliding with another committed event are refused.
    """
    if not event_create.title:
        raise CalendarValidationError("Title is required")

    start_at, end_at = resolve_bounds(event_create)
    if start_at is None:
        raise CalendarValidationError("Start date/time is required")
    if end_at is None:
        raise CalendarValidationError("End date/time is required")
    check_bounds(start_at, end_at)

    await check_references(
        db=db,
        project_id=event_create.project_id,
        client_id=event_create.client_id,
    )

    is_available_slot = bool(event_create.is_available_slot)
    if not is_available_slot:
        await raise_on_conflict(db=db, start_at=start_at, end_at=end_at)

    now = datetime.now(UTC)
    event = models_calendar.CalendarEvent(
        id=uuid.uuid4(),
        title=event_create.title,
        start_at=start_at,
        end_at=end_at,
        created_at=now,
        updated_at=now,
        project_id=event_create.project_id,
        client_id=event_create.client_id,
        description=event_create.description,
        event_type=event_create.event_type or CalendarEventType.filming,
        location=event_create.location,
        all_day=bool(event_create.all_day),
        is_available_slot=is_available_slot,
        color=event_create.color,
    )
    await cruds_calendar.add_event(db=db, event=event)

    # Relationships are loaded by the query
    created_event = await cruds_calendar.get_event(db=db, event_id=event.id)
    if created_event is None:
        raise EventNotFoundError("Event not found")
    return created_event


async def update_event(
    db: AsyncSession,
    event_id: uuid.UUID,
    event_edit: schemas_calendar.CalendarEventEdit,
) -> models_calendar.CalendarEvent:
    """
    Merge `event_edit` in the event. Omitted and null fields keep their value.

    A bound is only changed by a datetime or a date: a `start_time` sent without `start_date`, or an `end_time`
    sent without any date, is ignored and the request still succeeds.
    Conflicts with other committed events are not checked again.
    """
    event = await cruds_calendar.get_event(db=db, event_id=event_id)
    if event is None:
        raise EventNotFoundError("Event not found")

    if event_edit.title is not None and not event_edit.title:
        raise CalendarValidationError("Title can not be empty")

    start_at, end_at = resolve_bounds(event_edit)
    start_at = start_at or event.start_at
    end_at = end_at or event.end_at
    check_bounds(start_at, end_at)

    if event.is_booked and event_edit.is_available_slot is False:
        raise CalendarValidationError(
            "A booked slot can not be turned into a committed event",
        )

    await check_references(
        db=db,
        project_id=event_edit.project_id,
        client_id=event_edit.client_id,
    )

    values: dict[str, Any] = event_edit.model_dump(
        exclude_none=True,
        exclude={
            "start_datetime",
            "end_datetime",
            "start_date",
            "start_time",
            "end_date",
            "end_time",
        },
    )
    values.update(
        {
            "start_at": start_at,
            "end_at": end_at,
            "updated_at": datetime.now(UTC),
        },
    )
    await cruds_calendar.edit_event(db=db, event_id=event_id, values=values)

    updated_event = await cruds_calendar.get_event(db=db, event_id=event_id)
    if updated_event is None:
        raise EventNotFoundError("Event not found")
    return updated_event


async def delete_event(
    db: AsyncSession,
    event_id: uuid.UUID,
) -> None:
    event = await cruds_calendar.get_event(db=db, event_id=event_id)
    if event is None:
        raise EventNotFoundError("Event not found")
    await cruds_calendar.delete_event(db=db, event_id=event_id)


async def book_slot(
    db: AsyncSession,
    slot_id: uuid.UUID,
    user: models_users.CoreUser,
    notification_tool: NotificationTool,
    project_id: uuid.UUID | None = None,
) -> models_calendar.CalendarEvent:
    """
    Book an available slot for `user`, optionally attaching it to one of their projects.

    The business owner is notified in the same transaction.
    """
    slot = await cruds_calendar.get_event(db=db, event_id=slot_id)
    if slot is None or not slot.is_available_slot:
        raise EventNotFoundError("Available slot not found")
    if slot.is_booked:
        raise SlotAlreadyBookedError

    if project_id is not None:
        if user.is_admin:
            await check_references(db=db, project_id=project_id, client_id=None)
        elif not await cruds_projects.is_project_owned_by(
            db=db,
            project_id=project_id,
            client_id=user.id,
        ):
            raise CalendarForbiddenError("This project does not belong to you")

    booked = await cruds_calendar.mark_slot_as_booked(
        db=db,
        slot_id=slot_id,
        booked_by=user.id,
        project_id=project_id,
        updated_at=datetime.now(UTC),
    )
    if not booked:
        # An other request booked the slot between our read and our write
        framehouse_calendar_logger.info(
            f"Booking of slot {slot_id} by {user.id} lost the race to an other booking",
        )
        raise SlotAlreadyBookedError

    await notification_tool.send_notification_to_business_owner(
        message=Message(
            type=NotificationType.slot_booked,
            title="Time Slot Booked",
            content=f"{user.name} booked a time slot for {slot.start_at:%Y-%m-%d %H:%M}",
            link="/calendar",
        ),
    )
    framehouse_calendar_logger.info(
        f"Slot {slot_id} ({slot.start_at} - {slot.end_at}) booked by {user.id}",
    )

    booked_slot = await cruds_calendar.get_event(db=db, event_id=slot_id)
    if booked_slot is None:
        raise EventNotFoundError("Available slot not found")
    return booked_slot
