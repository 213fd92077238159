import asyncio
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncConnection

from framehouse.dependencies import get_settings
from framehouse.types.sqlalchemy import Base
from framehouse.utils.state import init_engine

config = context.config

# Loggers configured by the application must keep working when migrations run at startup
# See https://stackoverflow.com/questions/42427487/using-alembic-config-main-redirects-log-output
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# Every model must be imported for `--autogenerate` to see its table
for models_file in sorted(Path().glob("framehouse/**/models_*.py")):
    __import__(".".join(models_file.with_suffix("").parts))

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """
    Emit the SQL of the migrations instead of running them (`alembic upgrade --sql`)
    """
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        # Generated migrations import `TZDateTime` and `WallClockDateTime` from framehouse.types.sqlalchemy by hand
        # See https://alembic.sqlalchemy.org/en/latest/autogenerate.html#controlling-the-module-prefix
        user_module_prefix="",
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations(connection: AsyncConnection) -> None:
    # Alembic inspects the database, which requires a synchronous connection
    # See https://alembic.sqlalchemy.org/en/latest/cookbook.html#programmatic-api-use-connection-sharing-with-asyncio
    await connection.run_sync(do_run_migrations)


async def run_cli_migrations() -> None:
    """
    The `alembic` command line targets the database of the production settings
    """
    engine = init_engine(get_settings())
    async with engine.connect() as connection:
        await run_async_migrations(connection)
    await engine.dispose()


def run_migrations_online() -> None:
    """
    The application (at startup) and pytest-alembic pass their own synchronous connection in the config attributes.
    See https://alembic.sqlalchemy.org/en/latest/cookbook.html#connection-sharing
    """
    connection: Connection | AsyncConnection | None = config.attributes.get(
        "connection",
    )

    if connection is None:
        asyncio.run(run_cli_migrations())
    elif isinstance(connection, AsyncConnection):
        asyncio.run(run_async_migrations(connection))
    elif isinstance(connection, Connection):
        do_run_migrations(connection)
    else:
        raise TypeError(  # noqa: TRY003
            f"Expected a Connection or an AsyncConnection, got {type(connection)}",
        )


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
