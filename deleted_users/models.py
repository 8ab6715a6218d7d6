from enum import Enum
from typing import Optional

from google.cloud import firestore
from pydantic import BaseModel, Field


class DeletionStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    NOT_FOUND = "not_found"


MISSING_UID_ERROR = "Missing UID"
AUTH_USER_NOT_FOUND_ERROR = "Auth user not found"


class DeletionOutcome(BaseModel):
    """マーカーに書き込む終端ステータス"""
    uid: Optional[str] = None
    authDeletionStatus: DeletionStatus
    authDeletionError: Optional[str] = None

    def to_update(self) -> dict:
        """Firestore update() 用のフィールド。authDeletionAt は毎回サーバー時刻。"""
        fields = {
            "authDeletionStatus": self.authDeletionStatus.value,
            "authDeletionAt": firestore.SERVER_TIMESTAMP,
        }
        if self.authDeletionError is not None:
            fields["authDeletionError"] = self.authDeletionError
        else:
            # 再実行時に以前の失敗理由を残さない
            fields["authDeletionError"] = firestore.DELETE_FIELD
        return fields


class DeletedUserEvent(BaseModel):
    """deletedUsers/{uid} 作成イベントの通知ペイロード"""
    uid: Optional[str] = Field(None, description="Firebase Auth の uid (= マーカーのドキュメントID)")
    document: Optional[str] = Field(None, description="例: deletedUsers/abc123")
