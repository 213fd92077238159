import logging
from typing import TypedDict

import redis
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from framehouse.core.utils.config import Settings
from framehouse.types.sqlalchemy import SessionLocalType


class LifespanState(TypedDict):
    """
    Objects created once at startup. Endpoints reach them through the dependencies, never through the app.
    """

    engine: AsyncEngine
    SessionLocal: SessionLocalType
    # None when Redis is not configured or not reachable
    redis_client: redis.Redis | None


class RuntimeLifespanState(LifespanState):
    """
    Per request copy of the lifespan state, with the identifier added by the logging middleware
    """

    request_id: str


def get_async_database_url(settings: Settings) -> str:
    if settings.SQLITE_DB:
        return f"sqlite+aiosqlite:///./{settings.SQLITE_DB}"
    return f"postgresql+asyncpg://{settings.POSTGRES_USER}:{settings.POSTGRES_PASSWORD}@{settings.POSTGRES_HOST}/{settings.POSTGRES_DB}"


def init_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(
        get_async_database_url(settings),
        echo=settings.DATABASE_DEBUG,
    )


def init_SessionLocal(engine: AsyncEngine) -> SessionLocalType:
    # Objects stay usable after the commit, responses are serialized once the transaction is over
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


def init_redis_client(
    settings: Settings,
    framehouse_error_logger: logging.Logger,
) -> redis.Redis | None:
    """
    Connect to Redis if REDIS_HOST is set. An unreachable server is logged and the application runs without it.
    """
    if not settings.REDIS_HOST:
        return None

    redis_client = redis.Redis(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        password=settings.REDIS_PASSWORD,
        socket_keepalive=True,
    )
    try:
        redis_client.ping()
    except redis.exceptions.ConnectionError:
        framehouse_error_logger.exception(
            f"Startup: Redis server {settings.REDIS_HOST}:{settings.REDIS_PORT} is not reachable, rate limiting is disabled",
        )
        redis_client.close()
        return None
    return redis_client


def disconnect_redis_client(redis_client: redis.Redis | None) -> None:
    if redis_client is not None:
        redis_client.close()
