import os

# Use internal in-memory Firestore for unit level
os.environ["USE_MOCK_DB"] = "1"
os.environ.setdefault("GOOGLE_CLOUD_PROJECT", "test-project")

import pytest
from unittest.mock import MagicMock

from deleted_users import firebase
from deleted_users.services.auth_accounts import AccountService, LookupKind, LookupResult


@pytest.fixture(autouse=True)
def mock_db():
    firebase.reset_db()
    db = firebase.get_db()
    yield db
    firebase.reset_db()


@pytest.fixture
def marker(mock_db):
    def _create(uid):
        ref = mock_db.collection(firebase.DELETED_USERS_COLLECTION).document(uid)
        ref.set({"requestedBy": "app"})
        return ref
    return _create


@pytest.fixture
def accounts():
    """存在するユーザーの削除に成功する AccountService"""
    svc = MagicMock(spec=AccountService)
    svc.lookup.return_value = LookupResult(kind=LookupKind.FOUND, user=MagicMock(uid="abc123"))
    svc.delete.return_value = None
    return svc
