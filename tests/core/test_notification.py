import uuid
from datetime import UTC, datetime, timedelta

import pytest_asyncio
from fastapi.testclient import TestClient

from framehouse.core.notification import models_notification
from framehouse.core.notification.notification_types import NotificationType
from framehouse.core.notification.schemas_notification import Message
from framehouse.core.notification.utils_notification import NotificationTool
from framehouse.core.users import models_users
from framehouse.core.users.types_users import UserRole
from tests.commons import (
    TestingSessionLocal,
    add_object_to_db,
    create_api_access_token,
    create_user,
)

owner: models_users.CoreUser
other_admin: models_users.CoreUser
client_user: models_users.CoreUser
token_owner: str
token_client: str

old_notification: models_notification.Notification
new_notification: models_notification.Notification
client_notification: models_notification.Notification


def build_notification(
    user: models_users.CoreUser,
    created_on: datetime,
    title: str = "Time Slot Booked",
) -> models_notification.Notification:
    return models_notification.Notification(
        id=uuid.uuid4(),
        user_id=user.id,
        type=NotificationType.slot_booked,
        title=title,
        message="A client booked a time slot",
        link="/calendar",
        created_on=created_on,
    )


@pytest_asyncio.fixture(scope="module", autouse=True)
async def init_objects() -> None:
    global owner, other_admin, client_user, token_owner, token_client
    # Admins without creation date come after the dated ones
    other_admin = await create_user(role=UserRole.admin)
    owner = await create_user(
        role=UserRole.admin,
        created_on=datetime(2021, 5, 1, tzinfo=UTC),
    )
    token_owner = create_api_access_token(owner)
    client_user = await create_user()
    token_client = create_api_access_token(client_user)

    now = datetime.now(UTC)

    global old_notification, new_notification, client_notification
    old_notification = build_notification(owner, now - timedelta(days=2), "Old")
    await add_object_to_db(old_notification)
    new_notification = build_notification(owner, now - timedelta(hours=1), "New")
    await add_object_to_db(new_notification)
    client_notification = build_notification(client_user, now)
    await add_object_to_db(client_notification)


def test_get_notifications_newest_first(client: TestClient) -> None:
    response = client.get(
        "/notifications",
        headers={"Authorization": f"Bearer {token_owner}"},
    )
    assert response.status_code == 200
    assert [notification["id"] for notification in response.json()] == [
        str(new_notification.id),
        str(old_notification.id),
    ]


def test_mark_notification_of_an_other_user_as_read(client: TestClient) -> None:
    response = client.patch(
        f"/notifications/{client_notification.id}/read",
        headers={"Authorization": f"Bearer {token_owner}"},
    )
    assert response.status_code == 404


def test_mark_nonexistent_notification_as_read(client: TestClient) -> None:
    response = client.patch(
        f"/notifications/{uuid.uuid4()}/read",
        headers={"Authorization": f"Bearer {token_owner}"},
    )
    assert response.status_code == 404


def test_mark_notification_as_read(client: TestClient) -> None:
    response = client.patch(
        f"/notifications/{old_notification.id}/read",
        headers={"Authorization": f"Bearer {token_owner}"},
    )
    assert response.status_code == 204

    response = client.get(
        "/notifications",
        params={"unread_only": True},
        headers={"Authorization": f"Bearer {token_owner}"},
    )
    assert [notification["id"] for notification in response.json()] == [
        str(new_notification.id),
    ]


async def test_notify_business_owner() -> None:
    async with TestingSessionLocal() as db:
        notification_tool = NotificationTool(db=db)
        recipient_id = await notification_tool.send_notification_to_business_owner(
            message=Message(
                type=NotificationType.event_created,
                title="Event created",
                content="A shoot was planned",
                link="/calendar",
            ),
        )
        await db.commit()

    assert recipient_id == owner.id


def test_notifications_are_private(client: TestClient) -> None:
    response = client.get(
        "/notifications",
        headers={"Authorization": f"Bearer {token_client}"},
    )
    assert response.status_code == 200
    assert [notification["id"] for notification in response.json()] == [
        str(client_notification.id),
    ]
