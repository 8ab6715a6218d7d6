"""
deleted_user_handler.py - deletedUsers/{uid} 作成時の Auth ユーザー削除

マーカー作成を受けて Firebase Auth のユーザーを削除し、結果を
authDeletionStatus / authDeletionError / authDeletionAt としてマーカーに書き戻す。

- 1 回の呼び出しで lookup と delete は高々 1 回ずつ
- マーカーへの書き込みは必ず 1 回 (update のみ。削除・再作成はしない)
- 例外はハンドラー外に投げない (再実行時はユーザー不在 = not_found に収束する)
"""

import logging
from typing import Optional

from deleted_users.models import (
    AUTH_USER_NOT_FOUND_ERROR,
    MISSING_UID_ERROR,
    DeletionOutcome,
    DeletionStatus,
)
from deleted_users.services.auth_accounts import AccountService, LookupKind, account_service

logger = logging.getLogger("deleted_users.handler")


def _error_text(err: Exception) -> str:
    return str(err) or type(err).__name__


def _resolve(uid: Optional[str], accounts: AccountService) -> DeletionOutcome:
    if not uid:
        return DeletionOutcome(
            uid=uid,
            authDeletionStatus=DeletionStatus.FAILED,
            authDeletionError=MISSING_UID_ERROR,
        )

    lookup = accounts.lookup(uid)
    if lookup.kind == LookupKind.NOT_FOUND:
        logger.info(f"[DeletedUser] Lookup for {uid} reported not found: {lookup.error!r}")
        return DeletionOutcome(
            uid=uid,
            authDeletionStatus=DeletionStatus.NOT_FOUND,
            authDeletionError=AUTH_USER_NOT_FOUND_ERROR,
        )
    # FOUND / OTHER はどちらも削除を試みる
    if lookup.kind == LookupKind.OTHER:
        logger.warning(f"[DeletedUser] Lookup for {uid} inconclusive ({lookup.error!r}), deleting anyway")
    elif lookup.user is not None:
        logger.debug(f"[DeletedUser] Auth user {lookup.user.uid} exists, deleting")

    try:
        accounts.delete(uid)
    except Exception as e:
        return DeletionOutcome(
            uid=uid,
            authDeletionStatus=DeletionStatus.FAILED,
            authDeletionError=_error_text(e),
        )
    return DeletionOutcome(uid=uid, authDeletionStatus=DeletionStatus.SUCCESS)


def handle_deleted_user(uid: Optional[str], ref, accounts: Optional[AccountService] = None) -> DeletionOutcome:
    """
    マーカー 1 件を処理して終端ステータスを書き込む。

    Args:
        uid: マーカーのドキュメントID (= Firebase Auth uid)
        ref: マーカーの DocumentReference
        accounts: テスト用の差し替え (省略時は Firebase Admin)

    Returns:
        DeletionOutcome: 書き込んだ結果
    """
    accounts = accounts or account_service

    try:
        outcome = _resolve(uid, accounts)
    except Exception as e:
        # lookup 自体の想定外エラーなど
        logger.exception(f"[DeletedUser] Unexpected error for {uid}")
        outcome = DeletionOutcome(
            uid=uid,
            authDeletionStatus=DeletionStatus.FAILED,
            authDeletionError=_error_text(e),
        )

    if outcome.authDeletionStatus == DeletionStatus.SUCCESS:
        logger.info(f"[DeletedUser] Auth user {uid} deleted.")
    elif outcome.authDeletionStatus == DeletionStatus.NOT_FOUND:
        logger.warning(f"[DeletedUser] Auth user {uid} not found (already deleted?)")
    else:
        logger.error(f"[DeletedUser] Auth deletion failed for {uid!r}: {outcome.authDeletionError}")

    try:
        ref.update(outcome.to_update())
    except Exception:
        logger.exception(f"[DeletedUser] Failed to write outcome to marker {uid!r}")

    return outcome
