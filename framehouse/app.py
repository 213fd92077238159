"""Application factory: database bootstrap, middlewares, exception handlers and routers"""

import logging
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import cast

from alembic import command as alembic_command
from alembic.config import Config as AlembicConfig
from alembic.migration import MigrationContext
from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from sqlalchemy.engine import Connection, Engine

from framehouse import api
from framehouse.core.utils.config import Settings
from framehouse.core.utils.log import LogConfig
from framehouse.dependencies import (
    disconnect_state,
    get_app_state,
    get_redis_client,
    init_app_state,
)
from framehouse.types.exceptions import ContentHTTPException
from framehouse.types.sqlalchemy import Base
from framehouse.utils import initialization
from framehouse.utils.redis import limiter
from framehouse.utils.state import LifespanState

# Loggers are configured by `get_application`, they must not be retrieved at import time in this file


def alembic_config_for(connection: Connection) -> AlembicConfig:
    """
    Alembic configuration sharing `connection`, `migrations/env.py` picks it from the attributes.
    See https://alembic.sqlalchemy.org/en/latest/cookbook.html#connection-sharing
    """
    alembic_cfg = AlembicConfig("alembic.ini")
    alembic_cfg.attributes["connection"] = connection
    return alembic_cfg


def current_schema_revision(connection: Connection) -> str | None:
    """
    Revision stamped in the `alembic_version` table, None for an empty database.

    Inspection requires a synchronous connection.
    """
    return MigrationContext.configure(connection).get_current_revision()


def update_db_tables(
    sync_engine: Engine,
    framehouse_error_logger: logging.Logger,
    drop_db: bool = False,
) -> None:
    """
    Bring the schema to the `head` revision.

    An empty database is built from the models then stamped, instead of replaying every migration
    (see https://alembic.sqlalchemy.org/en/latest/cookbook.html#building-an-up-to-date-database-from-scratch).
    An existing database is upgraded. With `drop_db`, every table is dropped first.
    """
    try:
        with sync_engine.begin() as conn:
            if drop_db:
                initialization.drop_db_sync(conn)

            revision = current_schema_revision(conn)
            if revision is None:
                framehouse_error_logger.info(
                    "Startup: Empty database, creating the tables from the models",
                )
                Base.metadata.create_all(conn)
                alembic_command.stamp(alembic_config_for(conn), "head")
            else:
                framehouse_error_logger.info(
                    f"Startup: Database at revision {revision}, applying pending migrations",
                )
                alembic_command.upgrade(alembic_config_for(conn), "head")

            framehouse_error_logger.info("Startup: Database schema is up to date")
    except Exception as error:
        framehouse_error_logger.fatal(
            f"Startup: Failed to prepare the database schema: {error}",
        )
        raise


def init_db(
    settings: Settings,
    framehouse_error_logger: logging.Logger,
    drop_db: bool = False,
) -> None:
    """
    Create or migrate the tables, using a short lived synchronous engine
    """
    sync_engine = initialization.get_sync_db_engine(settings=settings)
    try:
        update_db_tables(
            sync_engine=sync_engine,
            framehouse_error_logger=framehouse_error_logger,
            drop_db=drop_db,
        )
    finally:
        sync_engine.dispose()


def use_route_path_as_operation_ids(app: FastAPI) -> None:
    """
    Name OpenAPI operations `<method>_<path>`, for instance `post_calendar_book_{slot_id}`,
    so that generated API clients get readable function names.

    See https://fastapi.tiangolo.com/advanced/path-operation-advanced-configuration/
    """
    for route in app.routes:
        if isinstance(route, APIRoute):
            methods = "_".join(sorted(route.methods)).lower()
            route.operation_id = methods + route.path.replace("/", "_")


def get_application(settings: Settings, drop_db: bool = False) -> FastAPI:
    """
    Build the API. Tests pass their own `settings` and use `drop_db` to start from an empty database.
    """
    LogConfig().initialize_loggers(settings=settings)

    framehouse_access_logger = logging.getLogger("framehouse.access")
    framehouse_security_logger = logging.getLogger("framehouse.security")
    framehouse_error_logger = logging.getLogger("framehouse.error")

    # The yielded state is shallow copied into every request
    # See https://www.starlette.io/lifespan/#lifespan-state
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[LifespanState, None]:
        framehouse_error_logger.info("Startup: Initializing application")

        init_db(
            settings=settings,
            framehouse_error_logger=framehouse_error_logger,
            drop_db=drop_db,
        )

        # Tests replace the state initialization using dependency overrides
        state_initializer = app.dependency_overrides.get(
            init_app_state,
            init_app_state,
        )
        state = cast(
            "LifespanState",
            await state_initializer(
                app=app,
                settings=settings,
                framehouse_error_logger=framehouse_error_logger,
            ),
        )

        yield state

        framehouse_error_logger.info("Shutdown: Releasing application state")
        state_finalizer = app.dependency_overrides.get(
            disconnect_state,
            disconnect_state,
        )
        await state_finalizer(
            state=state,
            framehouse_error_logger=framehouse_error_logger,
        )

    app = FastAPI(
        title=settings.BUSINESS_NAME,
        version=settings.FRAMEHOUSE_VERSION,
        lifespan=lifespan,
    )
    app.include_router(api.api_router)
    use_route_path_as_operation_ids(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def is_rate_limited(request: Request, ip_address: str) -> bool:
        redis_client = get_redis_client(get_app_state(request))
        if redis_client is None or not settings.ENABLE_RATE_LIMITER:
            return False

        process, alert = limiter(
            redis_client,
            ip_address,
            settings.REDIS_LIMIT,
            settings.REDIS_WINDOW,
        )
        if alert:
            framehouse_security_logger.warning(
                f"Rate limiter: {ip_address} reached {settings.REDIS_LIMIT} requests in {settings.REDIS_WINDOW}s",
            )
        return not process

    @app.middleware("http")
    async def logging_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """
        Give each request an identifier, stored in `request.state.request_id`, to correlate the logs it produces.
        Refuse rate limited clients, then write one access log line per request.
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        if request.client is None:
            framehouse_security_logger.warning(
                f"Middleware: request to {request.url.path} without client address ({request_id})",
            )
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"detail": "No client information"},
            )

        if is_rate_limited(request, request.client.host):
            return Response(status_code=429, content="Too Many Requests")

        response = await call_next(request)

        framehouse_access_logger.info(
            f'{request.client.host}:{request.client.port} - "{request.method} {request.url.path}" {response.status_code} ({request_id})',
        )
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ):
        # Payloads may hold personal data, they are only logged at the debug level
        framehouse_error_logger.debug(
            f"Invalid payload: {exc.errors()} ({request.state.request_id})",
        )
        return JSONResponse(
            status_code=422,
            content=jsonable_encoder({"detail": exc.errors(), "body": exc.body}),
        )

    @app.exception_handler(ContentHTTPException)
    async def content_exception_handler(
        request: Request,
        exc: ContentHTTPException,
    ):
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(exc.content),
            headers=exc.headers,
        )

    return app
