from enum import Enum


class ScopeType(str, Enum):
    """
    Various scopes that can be included in JWT token
    """

    # API allows the user to access every endpoint from the api
    API = "API"
