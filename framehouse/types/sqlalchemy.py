import datetime
import uuid
from collections.abc import Callable
from typing import Annotated

from sqlalchemy import DateTime, types
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass, mapped_column
from sqlalchemy.types import TypeDecorator

from framehouse.types.exceptions import MissingTZInfoInDatetimeError


class TZDateTime(TypeDecorator):
    """
    Server timestamps (`created_at`, `updated_at`...): aware datetimes stored as naive UTC, as SQLite has no timezone support.
    Recipe from https://docs.sqlalchemy.org/en/20/core/custom_types.html#store-timezone-aware-timestamps-as-timezone-naive-utc

    Migrations import this type: edit it only if the stored format does not change.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
            raise MissingTZInfoInDatetimeError()
        return value.astimezone(datetime.UTC).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=datetime.UTC)


class WallClockDateTime(TypeDecorator):
    """
    Naive datetime in the studio's local time.

    The studio works in a single timezone: a calendar instant is a date and a time of day, nothing more.
    A timezone-aware value is refused instead of being silently converted, callers must strip it first.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            raise TypeError("Wall-clock datetimes must be naive")  # noqa: TRY003
        return value


# `id: Mapped[PrimaryKey]` declares a UUID primary key
# See https://docs.sqlalchemy.org/en/20/orm/declarative_tables.html#mapping-whole-column-declarations-to-python-types
PrimaryKey = Annotated[uuid.UUID, mapped_column(primary_key=True)]

SessionLocalType = Callable[[], AsyncSession]


class Base(MappedAsDataclass, DeclarativeBase):
    """
    Declarative base of every model. Models are dataclasses: objects are built with keyword arguments.

    `Mapped[datetime]` columns are `TZDateTime` unless they declare another type.
    See https://docs.sqlalchemy.org/en/20/orm/declarative_tables.html#customizing-the-type-map
    """

    type_annotation_map = {
        bool: types.Boolean(),
        datetime.date: types.Date(),
        datetime.datetime: TZDateTime(),
        str: types.String(),
        uuid.UUID: types.Uuid(),
    }
