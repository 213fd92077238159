import uuid
from datetime import date, datetime, time

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from framehouse.core.projects.models_projects import Project
from framehouse.core.users.models_users import CoreUser
from framehouse.modules.calendar.types_calendar import CalendarEventType
from framehouse.types.sqlalchemy import Base, PrimaryKey, WallClockDateTime


class CalendarEvent(Base):
    """
    A committed event of the studio, or an available slot (a placeholder clients can book).

    Only committed events (`is_available_slot = False`) take part in conflict detection.
    A booked slot stays an available slot: `is_booked` implies `is_available_slot`.
    """

    __tablename__ = "calendar_event"

    id: Mapped[PrimaryKey]
    title: Mapped[str]
    # Wall-clock instants, in the studio's local time
    start_at: Mapped[datetime] = mapped_column(WallClockDateTime, index=True)
    end_at: Mapped[datetime] = mapped_column(WallClockDateTime)
    created_at: Mapped[datetime]
    updated_at: Mapped[datetime]
    project_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("project.id"),
        default=None,
    )
    client_id: Mapped[str | None] = mapped_column(
        ForeignKey("core_user.id"),
        default=None,
    )
    description: Mapped[str | None] = mapped_column(default=None)
    event_type: Mapped[CalendarEventType] = mapped_column(
        default=CalendarEventType.filming,
    )
    location: Mapped[str | None] = mapped_column(default=None)
    all_day: Mapped[bool] = mapped_column(default=False)
    is_available_slot: Mapped[bool] = mapped_column(default=False, index=True)
    is_booked: Mapped[bool] = mapped_column(default=False)
    booked_by: Mapped[str | None] = mapped_column(
        ForeignKey("core_user.id"),
        default=None,
    )
    color: Mapped[str | None] = mapped_column(default=None)

    project: Mapped[Project | None] = relationship(
        "Project",
        lazy="joined",
        init=False,
    )
    client: Mapped[CoreUser | None] = relationship(
        "CoreUser",
        foreign_keys="CalendarEvent.client_id",
        lazy="joined",
        init=False,
    )

    @property
    def project_title(self) -> str | None:
        return self.project.title if self.project is not None else None

    @property
    def client_name(self) -> str | None:
        """The direct client of the event, or the client of its project"""
        if self.client is not None:
            return self.client.name
        if self.project is not None:
            return self.project.client.name
        return None

    @property
    def start_date(self) -> date:
        return self.start_at.date()

    @property
    def start_time(self) -> time:
        return self.start_at.time()

    @property
    def end_date(self) -> date:
        return self.end_at.date()

    @property
    def end_time(self) -> time:
        return self.end_at.time()
