import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Request
from pydantic import ValidationError

from deleted_users.firebase import DELETED_USERS_COLLECTION, marker_ref
from deleted_users.models import DeletedUserEvent
from deleted_users.services.deleted_user_handler import handle_deleted_user

router = APIRouter()
logger = logging.getLogger("deleted_users.tasks")


@router.get("/internal/tasks/ping")
async def ping_task():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc)}


@router.post("/internal/tasks/deleted-user")
async def handle_deleted_user_task(request: Request):
    """
    deletedUsers/{uid} 作成イベントから呼び出される Worker エンドポイント。
    Payload: {"uid": str} または {"document": "deletedUsers/{uid}"}
    """
    try:
        payload = await request.json()
        event = DeletedUserEvent(**(payload or {}))
    except (ValueError, TypeError, ValidationError):
        raise HTTPException(status_code=400, detail="Invalid JSON")

    if event.document:
        parts = event.document.strip("/").split("/")
        if len(parts) != 2 or parts[0] != DELETED_USERS_COLLECTION or not parts[1]:
            logger.error(f"Rejected document path: {event.document!r}")
            raise HTTPException(status_code=400, detail="Invalid document path")
        doc_id = parts[1]
        uid = event.uid if event.uid is not None else doc_id
    elif event.uid:
        doc_id = uid = event.uid
    else:
        logger.error("uid/document is missing")
        return {"status": "error", "message": "uid or document required"}

    if "/" in doc_id:
        raise HTTPException(status_code=400, detail="Invalid document path")
    try:
        ref = marker_ref(doc_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid document path")

    outcome = handle_deleted_user(uid, ref)
    return {"status": "completed", **outcome.model_dump(exclude_none=True, mode="json")}
