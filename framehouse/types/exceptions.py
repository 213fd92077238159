from typing import Any

from fastapi import HTTPException, status


class ContentHTTPException(HTTPException):
    """
    HTTPException whose `content` is returned as the whole json body, instead of being wrapped in `{"detail": ...}`.

    Serialized by the handler registered in `get_application`.
    """

    def __init__(
        self,
        status_code: int,
        content: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=content, headers=headers)
        self.content = content


class SchedulingHTTPException(ContentHTTPException):
    """
    Base class for the errors of the scheduling engine.

    The response body is `{"error": <kind>, "detail": <message>}`, `kind` being stable
    so that clients can branch on it without parsing the message.
    """

    error: str = "error"
    default_status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=self.default_status_code,
            content={"error": self.error, "detail": detail},
        )


class CalendarValidationError(SchedulingHTTPException):
    error = "validation_error"
    default_status_code = status.HTTP_400_BAD_REQUEST


class EventNotFoundError(SchedulingHTTPException):
    error = "not_found"
    default_status_code = status.HTTP_404_NOT_FOUND


class EventConflictError(SchedulingHTTPException):
    error = "conflict"
    default_status_code = status.HTTP_409_CONFLICT


class SlotAlreadyBookedError(SchedulingHTTPException):
    error = "already_booked"
    default_status_code = status.HTTP_409_CONFLICT

    def __init__(self, detail: str = "This slot is already booked") -> None:
        super().__init__(detail)


class CalendarForbiddenError(SchedulingHTTPException):
    error = "forbidden"
    default_status_code = status.HTTP_403_FORBIDDEN


class MissingTZInfoInDatetimeError(TypeError):
    def __init__(self):
        super().__init__("Timestamps must be timezone-aware datetimes")


class DotenvMissingVariableError(Exception):
    def __init__(self, variable_name: str):
        super().__init__(f"{variable_name} must be set in the configuration")


class DotenvInvalidVariableError(Exception):
    pass
