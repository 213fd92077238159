import uuid
from datetime import date, datetime, time

from pydantic import BaseModel, ConfigDict, Field, field_validator

from framehouse.modules.calendar.types_calendar import CalendarEventType
from framehouse.utils import validators


class CalendarEventFields(BaseModel):
    """
    Fields shared by the creation and the edition of an event.

    The bounds of the event are given either as `start_datetime`/`end_datetime`,
    or as `start_date`/`start_time`/`end_date`/`end_time` which are combined by the engine.
    """

    title: str | None = None
    description: str | None = None
    event_type: CalendarEventType | None = None
    start_datetime: datetime | None = None
    end_datetime: datetime | None = None
    start_date: date | None = None
    start_time: time | None = None
    end_date: date | None = None
    end_time: time | None = None
    location: str | None = None
    all_day: bool | None = None
    is_available_slot: bool | None = None
    color: str | None = None
    project_id: uuid.UUID | None = None
    client_id: str | None = None

    _normalize_title = field_validator("title")(validators.trailing_spaces_remover)
    _normalize_datetimes = field_validator("start_datetime", "end_datetime")(
        validators.wall_clock_normalizer,
    )

    @field_validator("start_time", "end_time")
    @classmethod
    def drop_time_timezone(cls, value: time | None) -> time | None:
        if value is not None and value.tzinfo is not None:
            return value.replace(tzinfo=None)
        return value


class CalendarEventCreate(CalendarEventFields):
    # Clients can not create events, they book an available slot instead
    slot_id: uuid.UUID | None = None


class CalendarEventEdit(CalendarEventFields):
    pass


class CalendarEventBooking(BaseModel):
    project_id: uuid.UUID | None = None


class EventReturn(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID | None
    client_id: str | None
    title: str
    description: str | None
    event_type: CalendarEventType
    start_at: datetime
    end_at: datetime
    location: str | None
    all_day: bool
    is_available_slot: bool
    is_booked: bool
    booked_by: str | None
    color: str | None
    created_at: datetime
    updated_at: datetime

    project_title: str | None
    client_name: str | None
    start_date: date
    start_time: time
    end_date: date
    end_time: time

    model_config = ConfigDict(from_attributes=True)


class SlotGeneration(BaseModel):
    start_date: date
    end_date: date
    start_time: time = time(9, 0)
    end_time: time = time(17, 0)
    # In minutes, at most a whole day
    slot_duration: int = Field(120, gt=0, le=24 * 60)
    exclude_weekends: bool = True
    exclude_dates: list[date] = []


class GeneratedSlot(BaseModel):
    id: uuid.UUID
    start_at: datetime
    end_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SlotGenerationResult(BaseModel):
    slots_created: int
    slots: list[GeneratedSlot]
