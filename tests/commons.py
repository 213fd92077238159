import logging
import uuid
from datetime import UTC, date, datetime, time, timedelta
from functools import lru_cache

from fastapi import FastAPI
from sqlalchemy import NullPool
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from framehouse.core.auth import schemas_auth
from framehouse.core.projects import models_projects
from framehouse.core.projects.types_projects import ProjectStatus
from framehouse.core.users import cruds_users, models_users
from framehouse.core.users.types_users import UserRole
from framehouse.core.utils import security
from framehouse.core.utils.config import Settings
from framehouse.modules.calendar import models_calendar
from framehouse.modules.calendar.types_calendar import CalendarEventType
from framehouse.types.sqlalchemy import Base, SessionLocalType
from framehouse.utils.initialization import get_sync_database_url
from framehouse.utils.state import (
    LifespanState,
    get_async_database_url,
    init_redis_client,
)


class FailedToAddObjectToDB(Exception):
    pass


async def override_init_app_state(
    app: FastAPI,
    settings: Settings,
    framehouse_error_logger: logging.Logger,
) -> LifespanState:
    """
    Lifespan state of the test application: the engine of the tests, so that fixtures and requests share the database
    """
    engine = init_test_engine()
    SessionLocal = init_test_SessionLocal()
    redis_client = init_redis_client(
        settings=settings,
        framehouse_error_logger=framehouse_error_logger,
    )

    return LifespanState(
        engine=engine,
        SessionLocal=SessionLocal,
        redis_client=redis_client,
    )


@lru_cache
def override_get_settings() -> Settings:
    """
    Settings of `tests/config.test.yaml`
    """
    return Settings(
        _env_file="./tests/.env.test",
        _yaml_file="./tests/config.test.yaml",
    )


settings = override_get_settings()


SQLALCHEMY_DATABASE_URL = get_async_database_url(settings)
SQLALCHEMY_DATABASE_URL_SYNC = get_sync_database_url(settings)

engine = create_async_engine(
    SQLALCHEMY_DATABASE_URL,
    echo=settings.DATABASE_DEBUG,
    # pytest-asyncio runs the fixtures and the TestClient in different event loops, pooled connections can not be shared
    # See https://docs.sqlalchemy.org/en/20/orm/extensions/asyncio.html#using-multiple-asyncio-event-loops
    poolclass=NullPool,
)

TestingSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def init_test_engine() -> AsyncEngine:
    return engine


def init_test_SessionLocal() -> SessionLocalType:
    return TestingSessionLocal


def get_random_string(length: int = 10) -> str:
    return uuid.uuid4().hex[:length]


async def create_user(
    role: UserRole = UserRole.client,
    user_id: str | None = None,
    email: str | None = None,
    name: str | None = None,
    is_active: bool = True,
    created_on: datetime | None = None,
) -> models_users.CoreUser:
    """
    Insert a user, random values filling the identity fields that are not given
    """
    user_id = user_id or str(uuid.uuid4())

    user = models_users.CoreUser(
        id=user_id,
        email=email or (get_random_string() + "@framehouse.test"),
        name=name or get_random_string(),
        role=role,
        phone=None,
        is_active=is_active,
        created_on=created_on,
    )
    await add_object_to_db(user)

    async with TestingSessionLocal() as db:
        user_db = await cruds_users.get_user_by_id(db, user_id)
        assert user_db is not None
        return user_db


def create_api_access_token(
    user: models_users.CoreUser,
    expires_delta: timedelta | None = None,
):
    return security.create_access_token(
        data=schemas_auth.TokenData(sub=user.id, scopes="API"),
        settings=settings,
        expires_delta=expires_delta,
    )


def build_project(
    client: models_users.CoreUser,
    title: str | None = None,
    status: ProjectStatus = ProjectStatus.scheduled,
) -> models_projects.Project:
    return models_projects.Project(
        id=uuid.uuid4(),
        client_id=client.id,
        title=title or get_random_string(),
        created_on=datetime.now(UTC),
        status=status,
    )


def build_event(
    day: date,
    start: time,
    end: time,
    title: str = "Shooting",
    is_available_slot: bool = False,
    is_booked: bool = False,
    booked_by: str | None = None,
    project_id: uuid.UUID | None = None,
    client_id: str | None = None,
    event_type: CalendarEventType = CalendarEventType.filming,
) -> models_calendar.CalendarEvent:
    """
    Return a calendar event on `day`, from `start` to `end`, ready to be added to the database
    """
    now = datetime.now(UTC)
    return models_calendar.CalendarEvent(
        id=uuid.uuid4(),
        title=title,
        start_at=datetime.combine(day, start),
        end_at=datetime.combine(day, end),
        created_at=now,
        updated_at=now,
        project_id=project_id,
        client_id=client_id,
        event_type=event_type,
        is_available_slot=is_available_slot,
        is_booked=is_booked,
        booked_by=booked_by,
    )


async def add_object_to_db(db_object: Base) -> None:
    async with TestingSessionLocal() as db:
        db.add(db_object)
        try:
            await db.commit()
        except Exception as error:
            await db.rollback()
            raise FailedToAddObjectToDB from error
