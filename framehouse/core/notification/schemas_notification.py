from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from framehouse.core.notification.notification_types import NotificationType


class Message(BaseModel):
    """
    A notification as emitted by a module, before being addressed to its recipients
    """

    type: NotificationType
    title: str
    content: str
    link: str | None = None


class Notification(BaseModel):
    id: UUID
    user_id: str
    type: NotificationType
    title: str
    message: str
    link: str | None = None
    is_read: bool
    created_on: datetime

    model_config = ConfigDict(from_attributes=True)
