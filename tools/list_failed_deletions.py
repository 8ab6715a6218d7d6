import os
import sys

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from deleted_users.firebase import DELETED_USERS_COLLECTION, get_db
from deleted_users.models import DeletionStatus

# usage: python tools/list_failed_deletions.py [failed|not_found|success]


def main():
    status = sys.argv[1] if len(sys.argv) > 1 else DeletionStatus.FAILED.value
    if status not in {s.value for s in DeletionStatus}:
        print(f"Unknown status: {status}")
        sys.exit(1)

    docs = get_db().collection(DELETED_USERS_COLLECTION).where("authDeletionStatus", "==", status).stream()
    count = 0
    for doc in docs:
        data = doc.to_dict() or {}
        print(f"{doc.id}\t{data.get('authDeletionAt')}\t{data.get('authDeletionError', '')}")
        count += 1
    print(f"--- {count} marker(s) with authDeletionStatus={status}")


if __name__ == "__main__":
    main()
