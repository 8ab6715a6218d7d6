import logging
import os
import threading
import uuid
from datetime import datetime, timezone

import firebase_admin
from firebase_admin import credentials
from google.cloud import firestore

logger = logging.getLogger("deleted_users.firebase")

PROJECT_ID = os.environ.get("GOOGLE_CLOUD_PROJECT") or os.environ.get("GCP_PROJECT")
DELETED_USERS_COLLECTION = os.environ.get("DELETED_USERS_COLLECTION", "deletedUsers")
FIREBASE_CREDENTIALS = os.environ.get("FIREBASE_CREDENTIALS")

_init_lock = threading.Lock()
_db = None


def init_firebase() -> firebase_admin.App:
    """
    Firebase Admin SDK を初期化する (何度呼んでも安全)。

    最初の呼び出しだけがアプリを作成し、以降は既存の DEFAULT アプリを返す。
    """
    with _init_lock:
        try:
            return firebase_admin.get_app()
        except ValueError:
            pass

        # 鍵ファイルの不備 (ValueError) はそのまま投げる
        cred = None
        if FIREBASE_CREDENTIALS and os.path.exists(FIREBASE_CREDENTIALS):
            cred = credentials.Certificate(FIREBASE_CREDENTIALS)

        try:
            if cred is not None:
                app = firebase_admin.initialize_app(cred)
                logger.info("Firebase Admin initialized with key file")
            else:
                # Cloud Run の Service Account (ADC)
                app = firebase_admin.initialize_app()
            return app
        except ValueError as e:
            # DEFAULT app already exists (initialized outside this module)
            logger.info(f"Firebase Admin already initialized elsewhere: {e}")
            return firebase_admin.get_app()


def _is_mock_db() -> bool:
    return os.environ.get("USE_MOCK_DB", "0") == "1"


# ---------- In-memory Firestore (USE_MOCK_DB=1) ---------- #

class MockDocumentSnapshot:
    def __init__(self, reference, data, exists):
        self.reference = reference
        self.id = reference.id
        self._data = data
        self._exists = exists

    @property
    def exists(self):
        return self._exists

    def to_dict(self):
        return dict(self._data) if self._exists else None


class MockDocumentReference:
    def __init__(self, collection, id):
        self.collection = collection
        self.id = id

    @property
    def path(self):
        return f"{self.collection.name}/{self.id}"

    def get(self):
        data = self.collection._docs.get(self.id)
        return MockDocumentSnapshot(self, data or {}, data is not None)

    def set(self, data, merge=False):
        current = self.collection._docs.get(self.id) if merge else None
        resolved = _resolve_sentinels(data)
        self.collection._docs[self.id] = {**(current or {}), **resolved}
        logger.debug(f"[MockDB] Set {self.path}: {data}")

    def update(self, data):
        # Firestore rejects update() on a missing document
        if self.id not in self.collection._docs:
            raise KeyError(f"No document to update: {self.path}")
        doc = self.collection._docs[self.id]
        doc.update(_resolve_sentinels(data))
        for key, value in data.items():
            if value is firestore.DELETE_FIELD:
                doc.pop(key, None)
        logger.debug(f"[MockDB] Update {self.path}: {data}")

    def delete(self):
        self.collection._docs.pop(self.id, None)
        logger.debug(f"[MockDB] Delete {self.path}")


class MockQuery:
    def __init__(self, collection, filters=None):
        self.collection = collection
        self._filters = filters or []

    def where(self, field, op, value):
        # == のみ対応
        return MockQuery(self.collection, self._filters + [(field, op, value)])

    def stream(self):
        for doc_id, data in list(self.collection._docs.items()):
            if all(op == "==" and data.get(field) == value for field, op, value in self._filters):
                yield MockDocumentSnapshot(self.collection.document(doc_id), data, True)


class MockCollectionReference:
    def __init__(self, name):
        self.name = name
        self._docs = {}  # id -> data

    def document(self, doc_id=None):
        return MockDocumentReference(self, doc_id or uuid.uuid4().hex)

    def where(self, field, op, value):
        return MockQuery(self).where(field, op, value)

    def stream(self):
        return MockQuery(self).stream()


class MockFirestoreClient:
    def __init__(self):
        self._collections = {}

    def collection(self, name):
        if name not in self._collections:
            self._collections[name] = MockCollectionReference(name)
        return self._collections[name]

    def document(self, path):
        parts = [p for p in path.split("/") if p]
        if len(parts) != 2:
            raise ValueError(f"Unsupported document path: {path}")
        return self.collection(parts[0]).document(parts[1])


def _resolve_sentinels(data: dict) -> dict:
    # SERVER_TIMESTAMP はサーバー側で現在時刻に置換される。DELETE_FIELD は書き込まない
    now = datetime.now(timezone.utc)
    return {
        k: (now if v is firestore.SERVER_TIMESTAMP else v)
        for k, v in data.items()
        if v is not firestore.DELETE_FIELD
    }


# ---------- Initialization ---------- #

def get_db():
    """プロセス共有の Firestore クライアントを返す (初回のみ生成)。"""
    global _db
    if _db is None:
        if _is_mock_db():
            logger.warning("!!! USING MOCK DB !!!")
            _db = MockFirestoreClient()
        elif PROJECT_ID:
            _db = firestore.Client(project=PROJECT_ID)
        else:
            logger.warning("GOOGLE_CLOUD_PROJECT not set. Using default project resolution.")
            _db = firestore.Client()
    return _db


def reset_db() -> None:
    global _db
    _db = None


def marker_ref(uid: str):
    return get_db().collection(DELETED_USERS_COLLECTION).document(uid)
