from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from framehouse.core.users.types_users import UserRole
from framehouse.types.sqlalchemy import Base


class CoreUser(Base):
    __tablename__ = "core_user"

    id: Mapped[str] = mapped_column(
        primary_key=True,
        index=True,
    )
    email: Mapped[str] = mapped_column(unique=True, index=True)
    name: Mapped[str]
    role: Mapped[UserRole]
    phone: Mapped[str | None] = mapped_column(default=None)
    # Disabled accounts keep their history but can not call the API anymore
    is_active: Mapped[bool] = mapped_column(default=True)
    created_on: Mapped[datetime | None] = mapped_column(default=None)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin
