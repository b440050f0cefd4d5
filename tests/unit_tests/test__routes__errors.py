from unittest.mock import MagicMock

from fastapi import status
from fastapi.testclient import TestClient

from database import StoreUnavailableError
from notecode_api.main import create_app
from tests.consts import MISSING_FILE_ID, SAMPLE_FILE, USER_ONE_ID, USER_TWO_ID
from tests.fixtures.auth_fixtures import auth_headers


def create_file(client: TestClient) -> str:
    response = client.post("/api/files", json=SAMPLE_FILE, headers=auth_headers(USER_ONE_ID))
    return response.json()["id"]


def test_create_with_missing_fields(client):
    response = client.post("/api/files", json={"name": "a.py"}, headers=auth_headers(USER_ONE_ID))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "Required fields missing: name, language, and code are required"}


def test_create_with_malformed_json(client):
    headers = dict(auth_headers(USER_ONE_ID), **{"Content-Type": "application/json"})

    response = client.post("/api/files", content=b"{not json", headers=headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"].startswith("Invalid request body")


def test_create_with_wrong_field_type(client):
    response = client.post(
        "/api/files", json=dict(SAMPLE_FILE, code=["print(1)"]), headers=auth_headers(USER_ONE_ID)
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "code" in response.json()["error"]


def test_patch_with_nothing_to_update(client):
    file_id = create_file(client)

    response = client.patch(f"/api/files/{file_id}", json={}, headers=auth_headers(USER_ONE_ID))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "No updates provided"}


def test_patch_code_without_code(client):
    file_id = create_file(client)

    response = client.patch(f"/api/files/{file_id}/code", json={}, headers=auth_headers(USER_ONE_ID))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "Code is required"}


def test_patch_and_delete_someone_elses_file(client):
    file_id = create_file(client)
    stranger = auth_headers(USER_TWO_ID)

    patched = client.patch(f"/api/files/{file_id}", json={"name": "mine.py"}, headers=stranger)
    deleted = client.delete(f"/api/files/{file_id}", headers=stranger)

    assert patched.status_code == status.HTTP_403_FORBIDDEN
    assert patched.json() == {"error": "Not authorized to update this file"}
    assert deleted.status_code == status.HTTP_403_FORBIDDEN
    assert deleted.json() == {"error": "Not authorized to delete this file"}

    owner_view = client.get(f"/api/files/{file_id}", headers=auth_headers(USER_ONE_ID)).json()
    assert owner_view["name"] == SAMPLE_FILE["name"]


def test_patch_and_delete_missing_file(client):
    owner = auth_headers(USER_ONE_ID)

    assert client.patch(f"/api/files/{MISSING_FILE_ID}", json={"name": "x"}, headers=owner).status_code == 404
    assert client.delete(f"/api/files/{MISSING_FILE_ID}", headers=owner).status_code == 404


def test_store_timeout_is_service_unavailable(settings, store, users, monkeypatch):
    def timed_out(*args, **kwargs):
        raise StoreUnavailableError("database is locked")

    monkeypatch.setattr(store, "query_documents", timed_out)
    app = create_app(settings, store=store)

    with TestClient(app) as test_client:
        response = test_client.get(f"/api/files/user/{USER_ONE_ID}", headers=auth_headers(USER_ONE_ID))

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json() == {"message": "Service unavailable"}


def test_unexpected_error_is_a_generic_500(settings, store, users, monkeypatch):
    monkeypatch.setattr(store, "create_document", MagicMock(side_effect=RuntimeError("disk on fire")))
    app = create_app(settings, store=store)

    with TestClient(app) as test_client:
        response = test_client.post("/api/files", json=SAMPLE_FILE, headers=auth_headers(USER_ONE_ID))

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"message": "Something went wrong!"}
    assert "disk on fire" not in response.text


def test_unknown_route_uses_error_body(client):
    response = client.get("/api/nope/x/y", headers=auth_headers(USER_ONE_ID))

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "Not Found"}


def test_wrong_method_uses_error_body(client):
    response = client.put(f"/api/files/{MISSING_FILE_ID}", json={}, headers=auth_headers(USER_ONE_ID))

    assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
    assert response.json() == {"error": "Method Not Allowed"}
    assert "PATCH" in response.headers["allow"]
