from datetime import datetime

from fastapi import status
from fastapi.testclient import TestClient

from tests.consts import MISSING_FILE_ID, SAMPLE_FILE, USER_ONE_ID, USER_TWO_ID
from tests.fixtures.auth_fixtures import auth_headers


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def test_file_lifecycle_across_two_users(client: TestClient):
    owner = auth_headers(USER_ONE_ID)
    stranger = auth_headers(USER_TWO_ID)

    response = client.post("/api/files", json=SAMPLE_FILE, headers=owner)
    assert response.status_code == status.HTTP_201_CREATED
    created = response.json()
    assert created["owner"] == USER_ONE_ID
    assert created["createdAt"] == created["updatedAt"]
    file_id = created["id"]

    response = client.get(f"/api/files/{file_id}", headers=stranger)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json() == {"error": "Not authorized to access this file"}

    response = client.get(f"/api/files/{MISSING_FILE_ID}", headers=stranger)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "File not found"}

    response = client.patch(f"/api/files/{file_id}/code", json={"code": "print(2)"}, headers=owner)
    assert response.status_code == status.HTTP_200_OK
    updated = response.json()
    assert updated["code"] == "print(2)"
    assert parse_timestamp(updated["updatedAt"]) > parse_timestamp(created["updatedAt"])
    assert updated["createdAt"] == created["createdAt"]

    response = client.delete(f"/api/files/{file_id}", headers=owner)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "File deleted successfully"}

    response = client.get(f"/api/files/{file_id}", headers=owner)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_list_files_newest_first(client: TestClient):
    owner = auth_headers(USER_ONE_ID)
    first = client.post("/api/files", json=SAMPLE_FILE, headers=owner).json()
    second = client.post("/api/files", json=dict(SAMPLE_FILE, name="b.py"), headers=owner).json()
    client.patch(f"/api/files/{first['id']}/algo", json={"algo": "print once"}, headers=owner)

    response = client.get(f"/api/files/user/{USER_ONE_ID}", headers=owner)

    assert response.status_code == status.HTTP_200_OK
    assert [item["id"] for item in response.json()] == [first["id"], second["id"]]

    response = client.get(f"/api/files/user/{USER_ONE_ID}", headers=auth_headers(USER_TWO_ID))
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json() == {"error": "Not authorized to access these files"}


def test_partial_update_keeps_owner(client: TestClient):
    owner = auth_headers(USER_ONE_ID)
    file_id = client.post("/api/files", json=SAMPLE_FILE, headers=owner).json()["id"]

    response = client.patch(
        f"/api/files/{file_id}",
        json={"name": "renamed.py", "input": "3", "owner": USER_TWO_ID, "id": "other"},
        headers=owner,
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["name"] == "renamed.py"
    assert body["input"] == "3"
    assert body["owner"] == USER_ONE_ID
    assert body["id"] == file_id


def test_auth_check_route(client: TestClient):
    response = client.get("/api/test", headers=auth_headers(USER_ONE_ID))

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "File routes are working", "user": USER_ONE_ID}
