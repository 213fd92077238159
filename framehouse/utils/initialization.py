from sqlalchemy import Connection, MetaData
from sqlalchemy.engine import Engine, create_engine

from framehouse.core.utils.config import Settings
from framehouse.types.sqlalchemy import Base

# Alembic and the schema reset of the tests need a synchronous engine, the application only uses the async one


def get_sync_database_url(settings: Settings) -> str:
    if settings.SQLITE_DB:
        return f"sqlite:///./{settings.SQLITE_DB}"
    return f"postgresql+psycopg://{settings.POSTGRES_USER}:{settings.POSTGRES_PASSWORD}@{settings.POSTGRES_HOST}/{settings.POSTGRES_DB}"


def get_sync_db_engine(settings: Settings) -> Engine:
    return create_engine(
        get_sync_database_url(settings),
        echo=settings.DATABASE_DEBUG,
    )


def drop_db_sync(conn: Connection) -> None:
    """
    Remove every table of the database, `alembic_version` and tables of deleted models included
    """
    # The metadata of the models only knows the current tables, the reflected one knows them all
    reflected = MetaData(schema=Base.metadata.schema)
    reflected.reflect(bind=conn, resolve_fks=False)
    reflected.drop_all(bind=conn)
