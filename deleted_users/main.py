import logging
import os

from fastapi import FastAPI

from deleted_users.routes import tasks

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))

app = FastAPI(title="deleted-users-worker")
app.include_router(tasks.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
