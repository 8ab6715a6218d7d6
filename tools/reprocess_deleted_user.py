import logging
import os
import sys

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from deleted_users.firebase import marker_ref
from deleted_users.services.deleted_user_handler import handle_deleted_user

# usage: python tools/reprocess_deleted_user.py <uid>
# env: GOOGLE_APPLICATION_CREDENTIALS / GOOGLE_CLOUD_PROJECT must be set

logger = logging.getLogger("deleted_users.reprocess")


def main():
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))

    if len(sys.argv) < 2:
        print("Usage: python tools/reprocess_deleted_user.py <uid>")
        sys.exit(1)

    uid = sys.argv[1]
    ref = marker_ref(uid)
    snap = ref.get()
    if not snap.exists:
        print(f"❌ Marker not found: {ref.path}")
        sys.exit(1)

    previous = (snap.to_dict() or {}).get("authDeletionStatus")
    outcome = handle_deleted_user(uid, ref)
    print(f"{uid}: {previous} -> {outcome.authDeletionStatus.value}")
    if outcome.authDeletionError:
        print(f"  error: {outcome.authDeletionError}")


if __name__ == "__main__":
    main()
