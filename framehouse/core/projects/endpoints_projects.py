import uuid

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from framehouse.core.projects import cruds_projects, schemas_projects
from framehouse.core.users import models_users
from framehouse.dependencies import get_db, is_user
from framehouse.types.module import CoreModule

core_module = CoreModule(
    root="projects",
    tag="Projects",
)


@core_module.router.get(
    "/projects",
    response_model=list[schemas_projects.Project],
    status_code=200,
)
async def get_projects(
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user()),
):
    """
    Return all the projects for admins, and their own projects for clients.
    """
    return await cruds_projects.get_projects(
        db=db,
        client_id=None if user.is_admin else user.id,
    )


@core_module.router.get(
    "/projects/{project_id}",
    response_model=schemas_projects.Project,
    status_code=200,
)
async def get_project(
    project_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user()),
):
    project = await cruds_projects.get_project_by_id(db=db, project_id=project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    if not user.is_admin and project.client_id != user.id:
        raise HTTPException(
            status_code=403,
            detail="You are not allowed to access this project",
        )
    return project
