"""
Field validators shared by the schemas, used as `field_validator(...)(validator)`
"""

from datetime import datetime

import phonenumbers


def phone_formatter(phone: str | None) -> str | None:
    """
    Parse an international phone number and return it in E164 format.

    Raises a ValueError, turned by pydantic into a 422 response, when the number is not valid.
    """
    if phone is None:
        return None

    try:
        parsed = phonenumbers.parse(phone, None)
    except phonenumbers.NumberParseException as error:
        raise ValueError(f"Invalid phone number: {error}") from error
    if not phonenumbers.is_valid_number(parsed):
        raise ValueError("Invalid phone number")  # noqa: TRY003
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def trailing_spaces_remover(value: str | None) -> str | None:
    return value.strip() if value is not None else None


def wall_clock_normalizer(value: datetime | None) -> datetime | None:
    """
    Drop the timezone of a datetime without converting it.

    Calendar instants are wall-clock values: `2025-03-04T10:00:00+02:00` means 10:00 on the studio's calendar.
    """
    if value is not None and value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value
