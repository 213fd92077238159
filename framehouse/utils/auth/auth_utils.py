import logging

import jwt
from fastapi import HTTPException, status
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from framehouse.core.auth import schemas_auth
from framehouse.core.users import cruds_users, models_users
from framehouse.core.utils import security
from framehouse.core.utils.config import Settings
from framehouse.types.scopes_type import ScopeType

framehouse_access_logger = logging.getLogger("framehouse.access")
framehouse_security_logger = logging.getLogger("framehouse.security")


def get_token_data(
    settings: Settings,
    token: str,
    request_id: str,
) -> schemas_auth.TokenData:
    """
    Check the signature and the expiration of `token`, then parse its payload
    """
    try:
        payload = jwt.decode(
            token,
            settings.ACCESS_TOKEN_SECRET_KEY,
            algorithms=[security.jwt_algorithm],
        )
        token_data = schemas_auth.TokenData(**payload)
    except ExpiredSignatureError:
        # Subclass of InvalidTokenError
        framehouse_access_logger.info(
            f"Get_token_data: Expired token ({request_id})",
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Token has expired",
        ) from None
    except (InvalidTokenError, ValidationError):
        framehouse_security_logger.warning(
            f"Get_token_data: Invalid token ({request_id})",
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        ) from None

    framehouse_access_logger.info(
        f"Get_token_data: Token of user {token_data.sub} ({request_id})",
    )
    return token_data


def has_scopes(token_data: schemas_auth.TokenData, scopes: list[list[ScopeType]]) -> bool:
    """
    True if the token holds every scope of at least one list of `scopes`. An empty `scopes` accepts any token.
    """
    token_scopes = set(token_data.scopes.split(" "))
    return not scopes or any(
        all(scope in token_scopes for scope in scope_set) for scope_set in scopes
    )


async def get_user_from_token_with_scopes(
    scopes: list[list[ScopeType]],
    db: AsyncSession,
    token_data: schemas_auth.TokenData,
) -> models_users.CoreUser:
    """
    Return the active user the token was issued to, if the token holds the expected `scopes`
    """
    if not has_scopes(token_data, scopes):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Unauthorized, the token needs one of the scope sets {[[scope.value for scope in scope_set] for scope_set in scopes]}",
        )

    user = await cruds_users.get_user_by_id(db=db, user_id=token_data.sub)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    if not user.is_active:
        framehouse_security_logger.warning(
            f"Get_user_from_token: Disabled account {user.id} used a token",
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized, this account is disabled",
        )
    return user
