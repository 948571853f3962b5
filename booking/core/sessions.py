"""Server-side sessions keyed by an opaque cookie id."""
from typing import Optional
import json
import logging
import threading
import time

import redis
from fastapi import Request

from .config import settings
from .security import generate_session_id

logger = logging.getLogger(__name__)

FLASH_KEY = "flash"


class Session(dict):
    """Session payload for one request.

    Changes are persisted by ``session_middleware`` after the response is built.
    """

    def __init__(self, session_id: Optional[str] = None, data: Optional[dict] = None):
        super().__init__(data or {})
        self.session_id = session_id
        self.destroyed = False
        self.stale_id: Optional[str] = None
        self._snapshot = dict(self)

    @property
    def modified(self) -> bool:
        return dict(self) != self._snapshot

    def flash(self, message: str):
        self[FLASH_KEY] = message

    def pop_flash(self) -> Optional[str]:
        return self.pop(FLASH_KEY, None)

    def regenerate(self):
        """Move the payload to a fresh id; the old record is dropped on save."""
        if self.session_id and not self.stale_id:
            self.stale_id = self.session_id
        self.session_id = None
        self._snapshot = {}

    def destroy(self):
        self.clear()
        self.destroyed = True


class RedisSessionStore:
    def __init__(self, client, prefix: str = "session:"):
        self.client = client
        self.prefix = prefix

    def load(self, session_id: str) -> Optional[dict]:
        raw = self.client.get(self.prefix + session_id)
        if raw is None:
            return None
        return json.loads(raw)

    def save(self, session_id: str, data: dict, ttl: int):
        self.client.setex(self.prefix + session_id, ttl, json.dumps(data))

    def delete(self, session_id: str):
        self.client.delete(self.prefix + session_id)

    def ping(self):
        self.client.ping()


class MemorySessionStore:
    """In-process session store for tests and single-process development."""

    def __init__(self):
        self._data = {}
        self._lock = threading.Lock()

    def load(self, session_id: str) -> Optional[dict]:
        with self._lock:
            entry = self._data.get(session_id)
            if entry is None:
                return None
            expires_at, payload = entry
            if expires_at < time.monotonic():
                del self._data[session_id]
                return None
            return json.loads(payload)

    def save(self, session_id: str, data: dict, ttl: int):
        with self._lock:
            self._data[session_id] = (time.monotonic() + ttl, json.dumps(data))

    def delete(self, session_id: str):
        with self._lock:
            self._data.pop(session_id, None)

    def ping(self):
        return True


_store = None


def get_session_store():
    """Return the configured session store, creating it on first use."""
    global _store
    if _store is None:
        if settings.session_backend == "memory":
            _store = MemorySessionStore()
        else:
            _store = RedisSessionStore(
                redis.from_url(settings.REDIS_URL, decode_responses=True)
            )
    return _store


def get_session(request: Request) -> Session:
    """Session attached to the request by ``session_middleware``."""
    session = getattr(request.state, "session", None)
    if session is None:
        # Request failed before the middleware ran; hand out a throwaway session
        session = Session()
        request.state.session = session
    return session


async def session_middleware(request: Request, call_next):
    store = get_session_store()
    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    data = store.load(session_id) if session_id else None
    session = Session(session_id if data is not None else None, data)
    request.state.session = session

    response = await call_next(request)

    if session.stale_id:
        store.delete(session.stale_id)

    if session.destroyed:
        if session.session_id:
            store.delete(session.session_id)
        response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
        return response

    if session.modified and (session or session.session_id):
        if session.session_id is None:
            session.session_id = generate_session_id()
        store.save(session.session_id, dict(session), settings.SESSION_TTL_SECONDS)
        response.set_cookie(
            settings.SESSION_COOKIE_NAME,
            session.session_id,
            max_age=settings.SESSION_TTL_SECONDS,
            path="/",
            httponly=True,
            secure=settings.session_cookie_secure,
            samesite="lax",
        )
    return response
