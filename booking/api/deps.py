from fastapi import Depends, Request
from sqlalchemy.orm import Session
import logging

from ..core.database import get_db
from ..core.exceptions import CsrfError, NotAuthenticatedError
from ..core.messages import get_message
from ..core.security import Identity, verify_csrf_token
from ..core.sessions import get_session
from ..repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

SAFE_METHODS = ("GET", "HEAD", "OPTIONS")
CSRF_FORM_FIELD = "_csrf"
CSRF_HEADER = "X-CSRF-Token"
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def wants_json(request: Request) -> bool:
    """JSON endpoints get JSON errors; everything else gets pages and redirects."""
    if request.url.path.startswith("/clients"):
        return True
    return "application/json" in request.headers.get("accept", "")


async def get_current_identity(
    request: Request,
    db: Session = Depends(get_db)
) -> Identity:
    """Session gate: resolve the caller from the session or reject the request."""
    session = get_session(request)
    user_id = session.get("user_id")
    if user_id is None:
        raise NotAuthenticatedError(get_message("login_required"))

    user = UserRepository(db).get(user_id)
    if not user:
        # Account was deleted from another session
        session.destroy()
        raise NotAuthenticatedError(get_message("login_required"))

    return Identity(user_id=user.id, username=user.username)


async def verify_csrf(request: Request) -> None:
    """Reject mutating requests whose anti-forgery token does not match the session."""
    if request.method in SAFE_METHODS:
        return None

    submitted = request.headers.get(CSRF_HEADER)
    if not submitted:
        content_type = request.headers.get("content-type", "")
        if content_type.startswith(FORM_CONTENT_TYPES):
            form = await request.form()
            submitted = form.get(CSRF_FORM_FIELD)

    expected = get_session(request).get("csrf_token")
    if not verify_csrf_token(submitted, expected):
        logger.warning(f"CSRF check failed for {request.method} {request.url.path}")
        raise CsrfError(get_message("csrf_failed"))
