from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from framehouse.core.projects.types_projects import ProjectStatus
from framehouse.core.users.schemas_users import CoreUserSimple


class Project(BaseModel):
    id: UUID
    client_id: str
    title: str
    status: ProjectStatus
    created_on: datetime
    client: CoreUserSimple

    model_config = ConfigDict(from_attributes=True)
