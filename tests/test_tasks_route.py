import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient

from deleted_users.main import app
from deleted_users.services.auth_accounts import LookupKind, LookupResult

client = TestClient(app)


@pytest.fixture
def patched_accounts(accounts):
    with patch("deleted_users.services.deleted_user_handler.account_service", accounts):
        yield accounts


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ping():
    response = client.get("/internal/tasks/ping")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_deleted_user_by_uid(marker, patched_accounts):
    ref = marker("abc123")

    response = client.post("/internal/tasks/deleted-user", json={"uid": "abc123"})

    assert response.status_code == 200
    assert response.json() == {
        "status": "completed",
        "uid": "abc123",
        "authDeletionStatus": "success",
    }
    assert ref.get().to_dict()["authDeletionStatus"] == "success"
    patched_accounts.delete.assert_called_once_with("abc123")


def test_deleted_user_by_document_path(marker, patched_accounts):
    ref = marker("ghost")
    patched_accounts.lookup.return_value = LookupResult(kind=LookupKind.NOT_FOUND)

    response = client.post("/internal/tasks/deleted-user", json={"document": "deletedUsers/ghost"})

    data = response.json()
    assert data["uid"] == "ghost"
    assert data["authDeletionStatus"] == "not_found"
    assert data["authDeletionError"] == "Auth user not found"
    assert ref.get().to_dict()["authDeletionError"] == "Auth user not found"


def test_empty_uid_on_document_marks_missing_uid(marker, patched_accounts):
    ref = marker("abc123")

    response = client.post("/internal/tasks/deleted-user", json={"uid": "", "document": "deletedUsers/abc123"})

    assert response.json()["authDeletionError"] == "Missing UID"
    assert ref.get().to_dict()["authDeletionStatus"] == "failed"
    patched_accounts.lookup.assert_not_called()


def test_no_target_returns_error(patched_accounts):
    response = client.post("/internal/tasks/deleted-user", json={})

    assert response.status_code == 200
    assert response.json()["status"] == "error"
    patched_accounts.lookup.assert_not_called()


@pytest.mark.parametrize("document", [
    "deletedUsers",
    "deletedUsers/",
    "deletedUsers/abc123/devices",
    "users/abc123",
])
def test_invalid_document_path_returns_400(document, patched_accounts):
    response = client.post("/internal/tasks/deleted-user", json={"document": document})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid document path"
    patched_accounts.lookup.assert_not_called()


def test_uid_with_slash_returns_400(patched_accounts):
    response = client.post("/internal/tasks/deleted-user", json={"uid": "abc/123"})

    assert response.status_code == 400
    patched_accounts.delete.assert_not_called()


def test_invalid_json_returns_400():
    response = client.post(
        "/internal/tasks/deleted-user",
        content=b"not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
