from datetime import datetime

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from framehouse.core.projects.types_projects import ProjectStatus
from framehouse.core.users.models_users import CoreUser
from framehouse.types.sqlalchemy import Base, PrimaryKey


class Project(Base):
    __tablename__ = "project"

    id: Mapped[PrimaryKey]
    client_id: Mapped[str] = mapped_column(ForeignKey("core_user.id"), index=True)
    title: Mapped[str]
    created_on: Mapped[datetime]
    status: Mapped[ProjectStatus] = mapped_column(default=ProjectStatus.inquiry)

    client: Mapped[CoreUser] = relationship("CoreUser", lazy="joined", init=False)
