import logging
import uuid
from datetime import date, datetime

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from framehouse.core.notification.utils_notification import NotificationTool
from framehouse.core.users import models_users
from framehouse.core.utils.config import Settings
from framehouse.dependencies import (
    get_db,
    get_notification_tool,
    get_request_id,
    get_settings,
    is_user,
    is_user_an_admin,
)
from framehouse.modules.calendar import schemas_calendar, utils_calendar
from framehouse.modules.calendar.types_calendar import CalendarEventType
from framehouse.types.exceptions import CalendarForbiddenError
from framehouse.types.module import Module
from framehouse.utils import validators

module = Module(
    root="calendar",
    tag="Calendar",
)

framehouse_security_logger = logging.getLogger("framehouse.security")


@module.router.get(
    "/calendar",
    response_model=list[schemas_calendar.EventReturn],
    status_code=200,
)
async def get_events(
    start: date | None = Query(None),
    end: date | None = Query(None),
    event_type: CalendarEventType | None = Query(None, alias="type"),
    project_id: uuid.UUID | None = Query(None),
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user()),
):
    """
    Get the events starting between `start` and `end` (inclusive dates), ordered by start.

    Clients only receive their own events, the events of their projects and the available slots.
    """
    return await utils_calendar.list_events(
        db=db,
        user=user,
        start=start,
        end=end,
        event_type=event_type,
        project_id=project_id,
    )


@module.router.get(
    "/calendar/available-slots",
    response_model=list[schemas_calendar.EventReturn],
    status_code=200,
)
async def get_available_slots(
    start: datetime | None = Query(None),
    end: datetime | None = Query(None),
    duration: int | None = Query(
        None,
        description="Expected duration of the booking in minutes. It is not used to filter the slots",
    ),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    user: models_users.CoreUser = Depends(is_user()),
):
    """
    Get the unbooked available slots between `start` and `end`.

    **Usable by every user**
    """
    return await utils_calendar.list_available_slots(
        db=db,
        default_window_days=settings.AVAILABLE_SLOTS_DEFAULT_WINDOW_DAYS,
        start=validators.wall_clock_normalizer(start),
        end=validators.wall_clock_normalizer(end),
    )


@module.router.get(
    "/calendar/{event_id}",
    response_model=schemas_calendar.EventReturn,
    status_code=200,
)
async def get_event_by_id(
    event_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user()),
):
    return await utils_calendar.get_visible_event(db=db, event_id=event_id, user=user)


@module.router.post(
    "/calendar",
    response_model=schemas_calendar.EventReturn,
    status_code=201,
)
async def create_event(
    event_create: schemas_calendar.CalendarEventCreate,
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user()),
    notification_tool: NotificationTool = Depends(get_notification_tool),
    request_id: str = Depends(get_request_id),
):
    """
    Add an event to the calendar.

    **Only usable by admins.** Clients can only book an available slot by giving its `slot_id`.
    """
    if not user.is_admin:
        if event_create.slot_id is None:
            framehouse_security_logger.warning(
                f"Create_event: client {user.id} tried to create an event without a slot ({request_id})",
            )
            raise CalendarForbiddenError("Clients can only book available slots")

        return await utils_calendar.book_slot(
            db=db,
            slot_id=event_create.slot_id,
            user=user,
            notification_tool=notification_tool,
            project_id=event_create.project_id,
        )

    return await utils_calendar.create_event(db=db, event_create=event_create)


@module.router.post(
    "/calendar/book/{slot_id}",
    response_model=schemas_calendar.EventReturn,
    status_code=200,
)
async def book_slot(
    slot_id: uuid.UUID,
    booking: schemas_calendar.CalendarEventBooking | None = None,
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user()),
    notification_tool: NotificationTool = Depends(get_notification_tool),
):
    """
    Book an available slot, optionally for one of your projects.

    **Usable by every user**
    """
    return await utils_calendar.book_slot(
        db=db,
        slot_id=slot_id,
        user=user,
        notification_tool=notification_tool,
        project_id=booking.project_id if booking is not None else None,
    )


@module.router.post(
    "/calendar/generate-slots",
    response_model=schemas_calendar.SlotGenerationResult,
    status_code=201,
)
async def generate_slots(
    generation: schemas_calendar.SlotGeneration,
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user_an_admin),
):
    """
    Create available slots over a range of days.
    Candidate slots colliding with a committed event are skipped.

    **Only usable by admins**
    """
    slots = await utils_calendar.generate_available_slots(db=db, generation=generation)
    return schemas_calendar.SlotGenerationResult(
        slots_created=len(slots),
        slots=[schemas_calendar.GeneratedSlot.model_validate(slot) for slot in slots],
    )


@module.router.put(
    "/calendar/{event_id}",
    response_model=schemas_calendar.EventReturn,
    status_code=200,
)
async def update_event(
    event_id: uuid.UUID,
    event_edit: schemas_calendar.CalendarEventEdit,
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user_an_admin),
):
    """
    Edit an event. Omitted fields keep their value.

    **Only usable by admins**
    """
    return await utils_calendar.update_event(
        db=db,
        event_id=event_id,
        event_edit=event_edit,
    )


@module.router.delete(
    "/calendar/{event_id}",
    status_code=204,
)
async def delete_event(
    event_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user_an_admin),
):
    """
    Remove an event permanently.

    **Only usable by admins**
    """
    await utils_calendar.delete_event(db=db, event_id=event_id)
