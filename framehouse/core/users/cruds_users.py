"""File defining the functions called by the endpoints, making queries to the table using the models"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from framehouse.core.users import models_users, schemas_users
from framehouse.core.users.types_users import UserRole


async def get_user_by_id(
    db: AsyncSession,
    user_id: str,
) -> models_users.CoreUser | None:
    result = await db.execute(
        select(models_users.CoreUser).where(models_users.CoreUser.id == user_id),
    )
    return result.scalars().first()


async def get_first_admin(db: AsyncSession) -> models_users.CoreUser | None:
    """
    Return the oldest active admin account.

    The business owner is the first admin created, it receives the notifications addressed to the studio.
    Users without a creation date are considered the newest.
    """
    result = await db.execute(
        select(models_users.CoreUser)
        .where(
            models_users.CoreUser.role == UserRole.admin,
            models_users.CoreUser.is_active,
        )
        .order_by(
            models_users.CoreUser.created_on.is_(None),
            models_users.CoreUser.created_on,
            models_users.CoreUser.id,
        )
        .limit(1),
    )
    return result.scalars().first()


async def update_user(
    db: AsyncSession,
    user_id: str,
    user_update: schemas_users.CoreUserUpdate,
):
    values = user_update.model_dump(exclude_none=True)
    if not values:
        return
    await db.execute(
        update(models_users.CoreUser)
        .where(models_users.CoreUser.id == user_id)
        .values(**values),
    )
    await db.flush()
