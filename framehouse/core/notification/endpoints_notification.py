import uuid

from fastapi import Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from framehouse.core.notification import cruds_notification, schemas_notification
from framehouse.core.users import models_users
from framehouse.dependencies import get_db, is_user
from framehouse.types.module import CoreModule

core_module = CoreModule(
    root="notifications",
    tag="Notifications",
)


@core_module.router.get(
    "/notifications",
    response_model=list[schemas_notification.Notification],
    status_code=200,
)
async def get_notifications(
    unread_only: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user()),
):
    """
    Return the notifications addressed to the current user, newest first.
    """
    return await cruds_notification.get_notifications_by_user_id(
        user_id=user.id,
        db=db,
        unread_only=unread_only,
    )


@core_module.router.patch(
    "/notifications/{notification_id}/read",
    status_code=204,
)
async def mark_notification_as_read(
    notification_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user()),
):
    notification = await cruds_notification.get_notification_by_id(
        notification_id=notification_id,
        db=db,
    )
    # We don't want to disclose the existence of the notifications of other users
    if notification is None or notification.user_id != user.id:
        raise HTTPException(status_code=404, detail="Notification not found")

    await cruds_notification.mark_notification_as_read(
        notification_id=notification_id,
        db=db,
    )
