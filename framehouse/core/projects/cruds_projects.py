"""File defining the functions called by the endpoints, making queries to the table using the models"""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from framehouse.core.projects import models_projects


async def get_projects(
    db: AsyncSession,
    client_id: str | None = None,
) -> Sequence[models_projects.Project]:
    """
    Return all projects, or only the projects of `client_id` if provided
    """
    query = select(models_projects.Project)
    if client_id is not None:
        query = query.where(models_projects.Project.client_id == client_id)
    result = await db.execute(
        query.order_by(
            models_projects.Project.created_on.desc(),
            models_projects.Project.id,
        ),
    )
    return result.scalars().all()


async def get_project_by_id(
    db: AsyncSession,
    project_id: UUID,
) -> models_projects.Project | None:
    result = await db.execute(
        select(models_projects.Project).where(
            models_projects.Project.id == project_id,
        ),
    )
    return result.scalars().first()


async def is_project_owned_by(
    db: AsyncSession,
    project_id: UUID,
    client_id: str,
) -> bool:
    result = await db.execute(
        select(models_projects.Project.id).where(
            models_projects.Project.id == project_id,
            models_projects.Project.client_id == client_id,
        ),
    )
    return result.scalars().first() is not None
