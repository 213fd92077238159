from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import jwt
from fastapi.security import OAuth2AuthorizationCodeBearer

from framehouse.core.auth import schemas_auth

if TYPE_CHECKING:
    from framehouse.core.utils.config import Settings


# Framehouse does not issue tokens: the identity provider serves both urls, the scheme only documents them in OpenAPI
oauth2_scheme = OAuth2AuthorizationCodeBearer(
    authorizationUrl="/auth/authorize",
    tokenUrl="/auth/token",
    scheme_name="AuthorizationCodeAuthentication",
    scopes={"API": "Manage projects and the studio calendar"},
)

jwt_algorithm = "HS256"


def create_access_token(
    settings: "Settings",
    data: schemas_auth.TokenData,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Sign `data` the way the identity provider does, for the tests and the administration scripts.

    A negative `expires_delta` gives an already expired token.
    """
    issued_at = datetime.now(UTC)
    lifetime = (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims = data.model_dump(exclude_none=True)
    claims["iat"] = issued_at
    claims["exp"] = issued_at + lifetime
    return jwt.encode(claims, settings.ACCESS_TOKEN_SECRET_KEY, algorithm=jwt_algorithm)
