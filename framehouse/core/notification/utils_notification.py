import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from framehouse.core.notification import cruds_notification, models_notification
from framehouse.core.notification.schemas_notification import Message
from framehouse.core.users import cruds_users

framehouse_error_logger = logging.getLogger("framehouse.error")


class NotificationTool:
    """
    Utility class to record notifications.

    Notifications are written in the session of the request: they are committed with
    the action which emitted them, or not at all.
    The best way to get an instance is the `get_notification_tool` dependency.
    """

    def __init__(
        self,
        db: AsyncSession,
    ):
        self.db = db

    async def send_notification_to_users(
        self,
        user_ids: list[str],
        message: Message,
    ) -> None:
        if not user_ids:
            return

        now = datetime.now(UTC)
        await cruds_notification.create_notifications(
            notifications=[
                models_notification.Notification(
                    id=uuid.uuid4(),
                    user_id=user_id,
                    type=message.type,
                    title=message.title,
                    message=message.content,
                    link=message.link,
                    created_on=now,
                )
                for user_id in user_ids
            ],
            db=self.db,
        )

    async def send_notification_to_business_owner(
        self,
        message: Message,
    ) -> str | None:
        """
        Notify the first admin of the studio. Return its id, or None if there is no admin to notify.
        """
        admin = await cruds_users.get_first_admin(db=self.db)
        if admin is None:
            framehouse_error_logger.warning(
                f"Notification: no admin account to receive {message.type} notification",
            )
            return None

        await self.send_notification_to_users(user_ids=[admin.id], message=message)
        return admin.id
