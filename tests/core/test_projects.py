import uuid

import pytest_asyncio
from fastapi.testclient import TestClient

from framehouse.core.projects import cruds_projects, models_projects
from framehouse.core.users import models_users
from framehouse.core.users.types_users import UserRole
from tests.commons import (
    TestingSessionLocal,
    add_object_to_db,
    build_project,
    create_api_access_token,
    create_user,
)

admin_user: models_users.CoreUser
client_alice: models_users.CoreUser
client_bob: models_users.CoreUser
token_admin: str
token_alice: str

project_alice: models_projects.Project
project_bob: models_projects.Project


@pytest_asyncio.fixture(scope="module", autouse=True)
async def init_objects() -> None:
    global admin_user, client_alice, client_bob, token_admin, token_alice
    admin_user = await create_user(role=UserRole.admin)
    token_admin = create_api_access_token(admin_user)
    client_alice = await create_user()
    token_alice = create_api_access_token(client_alice)
    client_bob = await create_user()

    global project_alice, project_bob
    project_alice = build_project(client_alice, title="Music video")
    await add_object_to_db(project_alice)
    project_bob = build_project(client_bob, title="Documentary")
    await add_object_to_db(project_bob)


def test_get_projects_as_admin(client: TestClient) -> None:
    response = client.get(
        "/projects",
        headers={"Authorization": f"Bearer {token_admin}"},
    )
    assert response.status_code == 200
    assert {project["id"] for project in response.json()} == {
        str(project_alice.id),
        str(project_bob.id),
    }


def test_get_projects_as_client(client: TestClient) -> None:
    response = client.get(
        "/projects",
        headers={"Authorization": f"Bearer {token_alice}"},
    )
    assert response.status_code == 200
    assert [project["id"] for project in response.json()] == [str(project_alice.id)]


def test_get_project_of_an_other_client(client: TestClient) -> None:
    response = client.get(
        f"/projects/{project_bob.id}",
        headers={"Authorization": f"Bearer {token_alice}"},
    )
    assert response.status_code == 403


def test_get_own_project(client: TestClient) -> None:
    response = client.get(
        f"/projects/{project_alice.id}",
        headers={"Authorization": f"Bearer {token_alice}"},
    )
    assert response.status_code == 200
    assert response.json()["title"] == "Music video"


def test_get_nonexistent_project(client: TestClient) -> None:
    response = client.get(
        f"/projects/{uuid.uuid4()}",
        headers={"Authorization": f"Bearer {token_admin}"},
    )
    assert response.status_code == 404


async def test_is_project_owned_by() -> None:
    async with TestingSessionLocal() as db:
        assert await cruds_projects.is_project_owned_by(
            db=db,
            project_id=project_alice.id,
            client_id=client_alice.id,
        )
        assert not await cruds_projects.is_project_owned_by(
            db=db,
            project_id=project_bob.id,
            client_id=client_alice.id,
        )
