"""
FastAPI [dependencies](https://fastapi.tiangolo.com/tutorial/dependencies/) shared by the endpoints.

```python
async def get_events(
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user()),
): ...
```
"""

import logging
from collections.abc import AsyncGenerator, Callable, Coroutine
from functools import lru_cache
from typing import Annotated, Any, cast

import redis
import starlette.datastructures
from fastapi import Depends, FastAPI, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from framehouse.core.auth import schemas_auth
from framehouse.core.notification.utils_notification import NotificationTool
from framehouse.core.users import models_users
from framehouse.core.users.types_users import UserRole
from framehouse.core.utils import security
from framehouse.core.utils.config import Settings, construct_prod_settings
from framehouse.types.scopes_type import ScopeType
from framehouse.utils.auth import auth_utils
from framehouse.utils.state import (
    LifespanState,
    RuntimeLifespanState,
    disconnect_redis_client,
    init_engine,
    init_redis_client,
    init_SessionLocal,
)

framehouse_security_logger = logging.getLogger("framehouse.security")


async def init_app_state(
    app: FastAPI,
    settings: Settings,
    framehouse_error_logger: logging.Logger,
) -> LifespanState:
    """
    Build the objects living as long as the application: database engine, session maker and Redis client.

    Called by the lifespan through `app.dependency_overrides`, so that tests can substitute their own state.
    """
    engine = init_engine(settings=settings)

    return LifespanState(
        engine=engine,
        SessionLocal=init_SessionLocal(engine),
        redis_client=init_redis_client(
            settings=settings,
            framehouse_error_logger=framehouse_error_logger,
        ),
    )


async def disconnect_state(
    state: LifespanState,
    framehouse_error_logger: logging.Logger,
) -> None:
    """
    Close the connections opened by `init_app_state`, at the end of the lifespan.
    """
    disconnect_redis_client(state["redis_client"])
    await state["engine"].dispose()

    framehouse_error_logger.info("Shutdown: Application state released")


def get_app_state(request: Request) -> RuntimeLifespanState:
    """
    Lifespan state of the application, extended with the `request_id` set by the logging middleware.
    """
    # Depending on the caller, `request.state` is either a plain dict or a starlette State wrapping one
    if isinstance(request.state, dict):
        return cast("RuntimeLifespanState", request.state)
    return cast(
        "RuntimeLifespanState",
        cast("starlette.datastructures.State", request.state).__dict__["_state"],
    )


AppState = Annotated[RuntimeLifespanState, Depends(get_app_state)]


async def get_request_id(state: AppState) -> str:
    """
    Identifier of the current request, to be added to the log messages
    """
    return state["request_id"]


@lru_cache
def get_settings() -> Settings:
    """
    Production settings, read once from `config.yaml` and `.env`.

    See https://fastapi.tiangolo.com/advanced/settings/#lru_cache-technical-details
    """
    return construct_prod_settings()


async def get_db(state: AppState) -> AsyncGenerator[AsyncSession, None]:
    """
    One session, and one transaction, per request.

    The transaction is committed when the endpoint returns or raises an `HTTPException`: managed errors are raised
    before any write. Any other exception rolls the transaction back.

    Cruds only `flush()`, they never commit or rollback themselves.
    """
    async with state["SessionLocal"]() as db:
        try:
            yield db
        except HTTPException:
            await db.commit()
            raise
        except Exception:
            await db.rollback()
            raise
        else:
            await db.commit()
        finally:
            await db.close()


def get_redis_client(state: AppState) -> redis.Redis | None:
    """
    Redis client of the application, None when Redis is not configured or not reachable
    """
    return state["redis_client"]


def get_notification_tool(
    db: AsyncSession = Depends(get_db),
) -> NotificationTool:
    """
    Notification writer bound to the request transaction
    """
    return NotificationTool(db=db)


def get_token_data(
    settings: Settings = Depends(get_settings),
    token: str = Depends(security.oauth2_scheme),
    request_id: str = Depends(get_request_id),
) -> schemas_auth.TokenData:
    """
    Payload of the bearer token of the request
    """
    return auth_utils.get_token_data(
        settings=settings,
        token=token,
        request_id=request_id,
    )


def get_user_from_token_with_scopes(
    scopes: list[list[ScopeType]],
) -> Callable[
    [AsyncSession, schemas_auth.TokenData],
    Coroutine[Any, Any, models_users.CoreUser],
]:
    """
    Build a dependency returning the active user owning the bearer token.

    `scopes` is a disjunction of conjunctions: the token must hold every scope of at least one of the lists.
    Endpoints should use `is_user` or `is_user_an_admin` instead.
    """

    async def get_current_user(
        db: AsyncSession = Depends(get_db),
        token_data: schemas_auth.TokenData = Depends(get_token_data),
    ) -> models_users.CoreUser:
        return await auth_utils.get_user_from_token_with_scopes(
            scopes=scopes,
            db=db,
            token_data=token_data,
        )

    return get_current_user


def is_user(
    included_roles: list[UserRole] | None = None,
) -> Callable[[models_users.CoreUser, str], models_users.CoreUser]:
    """
    Build a dependency returning the user calling the API with a valid `API` token.

    When `included_roles` is given, users with another role are refused. Admins are never refused.
    """

    def is_user(
        user: models_users.CoreUser = Depends(
            get_user_from_token_with_scopes([[ScopeType.API]]),
        ),
        request_id: str = Depends(get_request_id),
    ) -> models_users.CoreUser:
        if user.is_admin or included_roles is None or user.role in included_roles:
            return user

        framehouse_security_logger.warning(
            f"Is_user: {user.role} {user.id} is not allowed to call this endpoint ({request_id})",
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized, user role is not allowed",
        )

    return is_user


def is_user_an_admin(
    user: models_users.CoreUser = Depends(is_user(included_roles=[UserRole.admin])),
) -> models_users.CoreUser:
    """
    The user calling the API, who must be an admin of the studio
    """
    return user
