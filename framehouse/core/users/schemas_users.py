from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

from framehouse.core.users.types_users import UserRole
from framehouse.utils import validators


class CoreUserSimple(BaseModel):
    id: str
    name: str
    role: UserRole

    model_config = ConfigDict(from_attributes=True)


class CoreUser(CoreUserSimple):
    email: str
    phone: str | None = None
    is_active: bool
    created_on: datetime | None = None


class CoreUserUpdate(BaseModel):
    name: str | None = None
    phone: str | None = None

    _normalize_name = field_validator("name")(validators.trailing_spaces_remover)
    _format_phone = field_validator("phone")(validators.phone_formatter)
