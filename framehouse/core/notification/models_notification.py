from datetime import datetime

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from framehouse.core.notification.notification_types import NotificationType
from framehouse.types.sqlalchemy import Base, PrimaryKey


class Notification(Base):
    __tablename__ = "notification"

    id: Mapped[PrimaryKey]
    user_id: Mapped[str] = mapped_column(ForeignKey("core_user.id"), index=True)
    type: Mapped[NotificationType]
    title: Mapped[str]
    message: Mapped[str]
    # Relative path of the dashboard page the notification refers to
    link: Mapped[str | None]
    created_on: Mapped[datetime]
    is_read: Mapped[bool] = mapped_column(default=False)
