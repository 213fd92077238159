"""Schemas for the access tokens issued by the identity provider"""

from datetime import datetime

from pydantic import BaseModel


class TokenData(BaseModel):
    sub: str  # Subject: the user id
    iss: str | None = None
    iat: datetime | None = None
    scopes: str = ""
    # exp and iat elements are added by the token generation function
