import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from firebase_admin import auth as fb_auth
from firebase_admin import exceptions as fb_exceptions

from deleted_users.firebase import init_firebase

logger = logging.getLogger("deleted_users.auth_accounts")

# Node 版 Admin SDK / REST が返すことのあるコード
NOT_FOUND_CODES = {"auth/user-not-found", "USER_NOT_FOUND"}


class LookupKind(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    OTHER = "other"


@dataclass
class LookupResult:
    kind: LookupKind
    user: Optional[fb_auth.UserRecord] = None
    error: Optional[Exception] = None


def is_not_found_error(err: Exception) -> bool:
    if isinstance(err, (fb_auth.UserNotFoundError, fb_exceptions.NotFoundError)):
        return True
    return getattr(err, "code", None) in NOT_FOUND_CODES


class AccountService:
    """Firebase Auth のユーザー参照・削除"""

    def lookup(self, uid: str) -> LookupResult:
        init_firebase()
        try:
            user = fb_auth.get_user(uid)
        except Exception as e:
            if is_not_found_error(e):
                return LookupResult(kind=LookupKind.NOT_FOUND, error=e)
            logger.debug(f"[Auth] Lookup for {uid} failed: {e!r}")
            return LookupResult(kind=LookupKind.OTHER, error=e)
        return LookupResult(kind=LookupKind.FOUND, user=user)

    def delete(self, uid: str) -> None:
        init_firebase()
        fb_auth.delete_user(uid)


account_service = AccountService()
