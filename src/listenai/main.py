"""
FastAPI application for the ListenAI transcript relay.

The relay holds a single record, {text, sourceLang, targetLang}, written by
the recording client and polled by viewers.

Endpoints:
    POST /              - Overwrite the record (400 if a field is missing)
    GET  /?action=fetch - The stored record, or the default state
    GET  /              - Service status
    GET  /health        - Health check

CORS is open to any origin so browser-based viewers on other hosts can poll.
"""

from __future__ import annotations

from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from listenai.store import STORE_PATH, FileStore

REQUIRED_FIELDS = ("text", "sourceLang", "targetLang")

app = FastAPI(
    title="ListenAI",
    description="Relay store for live transcripts and their language settings",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

_store = FileStore(STORE_PATH)


def get_store() -> FileStore:
    return _store


def is_valid_record(data: Any) -> bool:
    """A record must be a JSON object carrying every required field as a string."""
    if not isinstance(data, dict):
        return False
    return all(isinstance(data.get(name), str) for name in REQUIRED_FIELDS)


@app.post("/")
async def write_record(request: Request, store: FileStore = Depends(get_store)):
    try:
        data = await request.json()
    except ValueError:
        data = None

    if not is_valid_record(data):
        return JSONResponse(status_code=400, content={"status": "error"})

    store.write(data)
    return {"status": "success"}


@app.get("/")
async def fetch_record(action: str | None = None, store: FileStore = Depends(get_store)):
    if action == "fetch":
        return store.read()
    return {"status": "ok", "service": "listenai"}


@app.get("/health")
async def health():
    return {"status": "ok"}
