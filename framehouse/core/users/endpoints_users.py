from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from framehouse.core.users import cruds_users, models_users, schemas_users
from framehouse.dependencies import get_db, is_user
from framehouse.types.module import CoreModule

core_module = CoreModule(
    root="users",
    tag="Users",
)


@core_module.router.get(
    "/users/me",
    response_model=schemas_users.CoreUser,
    status_code=200,
)
async def read_current_user(
    user: models_users.CoreUser = Depends(is_user()),
):
    """
    Return `CoreUser` representation of current user
    """
    return user


@core_module.router.patch(
    "/users/me",
    response_model=schemas_users.CoreUser,
    status_code=200,
)
async def update_current_user(
    user_update: schemas_users.CoreUserUpdate,
    db: AsyncSession = Depends(get_db),
    user: models_users.CoreUser = Depends(is_user()),
):
    """
    Update the name or the phone number of the current user.
    The role and the activation of the account are managed by the identity provider.
    """
    await cruds_users.update_user(db=db, user_id=user.id, user_update=user_update)
    await db.refresh(user)
    return user
