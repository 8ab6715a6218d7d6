import uvicorn
import os

# Local run against the in-memory Firestore unless told otherwise
os.environ.setdefault("GOOGLE_CLOUD_PROJECT", "deleted-users-debug")
os.environ.setdefault("USE_MOCK_DB", "1")

if __name__ == "__main__":
    # Reload=True allows you to see changes immediately
    uvicorn.run("deleted_users.main:app", host="0.0.0.0", port=8000, reload=True)
