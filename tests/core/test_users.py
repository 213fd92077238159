import pytest_asyncio
from fastapi.testclient import TestClient

from framehouse.core.users import models_users
from framehouse.core.users.types_users import UserRole
from tests.commons import create_api_access_token, create_user

admin_user: models_users.CoreUser
client_user: models_users.CoreUser
token_admin: str
token_client: str


@pytest_asyncio.fixture(scope="module", autouse=True)
async def init_objects() -> None:
    global admin_user, client_user, token_admin, token_client
    admin_user = await create_user(role=UserRole.admin, name="Studio Owner")
    token_admin = create_api_access_token(admin_user)
    client_user = await create_user(name="Camille")
    token_client = create_api_access_token(client_user)


def test_read_current_user(client: TestClient) -> None:
    response = client.get(
        "/users/me",
        headers={"Authorization": f"Bearer {token_client}"},
    )
    assert response.status_code == 200
    user = response.json()
    assert user["id"] == client_user.id
    assert user["name"] == "Camille"
    assert user["role"] == "client"
    assert user["is_active"] is True


def test_read_current_admin(client: TestClient) -> None:
    response = client.get(
        "/users/me",
        headers={"Authorization": f"Bearer {token_admin}"},
    )
    assert response.status_code == 200
    assert response.json()["role"] == "admin"


def test_update_current_user(client: TestClient) -> None:
    response = client.patch(
        "/users/me",
        json={"name": " Camille Martin ", "phone": "+33 6 12 34 56 78"},
        headers={"Authorization": f"Bearer {token_client}"},
    )
    assert response.status_code == 200
    user = response.json()
    assert user["name"] == "Camille Martin"
    assert user["phone"] == "+33612345678"
    assert user["role"] == "client"


def test_update_current_user_with_null_name(client: TestClient) -> None:
    response = client.patch(
        "/users/me",
        json={"name": None},
        headers={"Authorization": f"Bearer {token_client}"},
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Camille Martin"


def test_update_current_user_with_invalid_phone(client: TestClient) -> None:
    response = client.patch(
        "/users/me",
        json={"phone": "not a phone"},
        headers={"Authorization": f"Bearer {token_client}"},
    )
    assert response.status_code == 422
