import tomllib
from functools import cached_property
from pathlib import Path
from typing import ClassVar

from pydantic import computed_field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from framehouse.types.exceptions import (
    DotenvInvalidVariableError,
    DotenvMissingVariableError,
)

PYPROJECT_PATH = Path("pyproject.toml")


class Settings(BaseSettings):
    """
    Configuration of a Framehouse instance.

    A value is taken from, by decreasing precedence:
    1. the keyword arguments of the constructor
    2. the environment variables
    3. the yaml file, `config.yaml` unless `_yaml_file` is given
    4. the dotenv file, `.env` unless `_env_file` is given

    Endpoints get the instance through the `get_settings` dependency, never by building one.
    See https://docs.pydantic.dev/latest/concepts/pydantic_settings/ and https://fastapi.tiangolo.com/advanced/settings/
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file="config.yaml",
        case_sensitive=False,
        extra="ignore",
    )

    # pydantic-settings has no `_yaml_file` init parameter, the path is kept on the class for `settings_customise_sources`
    # See https://github.com/pydantic/pydantic-settings/issues/259
    _yaml_file: ClassVar[str]

    def __init__(self, _yaml_file, _env_file, **kwargs):
        Settings._yaml_file = _yaml_file
        super().__init__(_env_file=_env_file, **kwargs)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_file),
            dotenv_settings,
        )

    # --- Access tokens ---

    # Key shared with the identity provider, which signs the access tokens (HS256).
    # Use a random string of at least 32 bytes
    ACCESS_TOKEN_SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # --- Studio ---

    # Title of the OpenAPI documentation
    BUSINESS_NAME: str = "Framehouse"

    LOG_DEBUG_MESSAGES: bool = False

    # Allowed origins of the dashboard, see https://fastapi.tiangolo.com/tutorial/cors/
    # Ex: `["https://dashboard.example.com"]`, without trailing slash
    CORS_ORIGINS: list[str]

    # Width of the window returned by `/calendar/available-slots` when the client does not give one
    AVAILABLE_SLOTS_DEFAULT_WINDOW_DAYS: int = 30

    # --- Database ---

    # A SQLite file, for development and tests. PostgreSQL is used when empty
    SQLITE_DB: str | None = None
    POSTGRES_HOST: str = ""
    POSTGRES_USER: str = ""
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = ""
    POSTGRES_TZ: str = ""
    # Echo every SQL query
    DATABASE_DEBUG: bool = False

    # --- Redis ---

    # Only the rate limiter uses Redis: without REDIS_HOST, requests are not limited
    REDIS_HOST: str | None = None
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: str | None = None
    # Maximum number of requests of an ip address in REDIS_WINDOW seconds
    REDIS_LIMIT: int = 1000
    REDIS_WINDOW: int = 60
    ENABLE_RATE_LIMITER: bool = True

    # --- Computed values ---

    @computed_field  # type: ignore[prop-decorator]
    @cached_property
    def FRAMEHOUSE_VERSION(cls) -> str:
        with PYPROJECT_PATH.open("rb") as pyproject_file:
            return str(tomllib.load(pyproject_file)["project"]["version"])

    # --- Validation ---

    @model_validator(mode="after")
    def check_database_settings(self) -> "Settings":
        postgres_configured = all(
            (
                self.POSTGRES_HOST,
                self.POSTGRES_USER,
                self.POSTGRES_PASSWORD,
                self.POSTGRES_DB,
            ),
        )
        if not (self.SQLITE_DB or postgres_configured):
            raise DotenvMissingVariableError(  # noqa: TRY003
                "SQLITE_DB, or all of POSTGRES_HOST, POSTGRES_USER, POSTGRES_PASSWORD and POSTGRES_DB,",
            )

        return self

    @model_validator(mode="after")
    def check_secrets(self) -> "Settings":
        if not self.ACCESS_TOKEN_SECRET_KEY:
            raise DotenvMissingVariableError("ACCESS_TOKEN_SECRET_KEY")

        return self

    @model_validator(mode="after")
    def check_scheduling_settings(self) -> "Settings":
        if self.AVAILABLE_SLOTS_DEFAULT_WINDOW_DAYS <= 0:
            raise DotenvInvalidVariableError(  # noqa: TRY003
                "AVAILABLE_SLOTS_DEFAULT_WINDOW_DAYS must be a positive number of days",
            )
        for origin in self.CORS_ORIGINS:
            if origin.endswith("/"):
                raise DotenvInvalidVariableError(  # noqa: TRY003
                    f"CORS origin {origin} must not end with a trailing slash",
                )

        return self

    @model_validator(mode="after")
    def init_cached_property(self) -> "Settings":
        """
        Compute the cached property now, so that a broken configuration fails at startup
        rather than on the first request using it.
        """
        self.FRAMEHOUSE_VERSION  # noqa: B018

        return self


def construct_prod_settings() -> Settings:
    """
    Settings read from `config.yaml` and `.env` in the working directory
    """
    return Settings(_env_file=".env", _yaml_file="config.yaml")
