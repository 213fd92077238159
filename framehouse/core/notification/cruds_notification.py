from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from framehouse.core.notification import models_notification


async def create_notifications(
    notifications: list[models_notification.Notification],
    db: AsyncSession,
) -> None:
    db.add_all(notifications)
    await db.flush()


async def get_notifications_by_user_id(
    user_id: str,
    db: AsyncSession,
    unread_only: bool = False,
) -> Sequence[models_notification.Notification]:
    query = select(models_notification.Notification).where(
        models_notification.Notification.user_id == user_id,
    )
    if unread_only:
        query = query.where(models_notification.Notification.is_read.is_(False))
    result = await db.execute(
        query.order_by(
            models_notification.Notification.created_on.desc(),
            models_notification.Notification.id,
        ),
    )
    return result.scalars().all()


async def get_notification_by_id(
    notification_id: UUID,
    db: AsyncSession,
) -> models_notification.Notification | None:
    result = await db.execute(
        select(models_notification.Notification).where(
            models_notification.Notification.id == notification_id,
        ),
    )
    return result.scalars().first()


async def mark_notification_as_read(
    notification_id: UUID,
    db: AsyncSession,
) -> None:
    await db.execute(
        update(models_notification.Notification)
        .where(models_notification.Notification.id == notification_id)
        .values(is_read=True),
    )
    await db.flush()
