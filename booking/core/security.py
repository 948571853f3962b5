from typing import Optional
from passlib.context import CryptContext
from markupsafe import Markup
from pydantic import BaseModel
import secrets

from .config import settings

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

class Identity(BaseModel):
    """The authenticated caller, built once per request by the session gate."""
    user_id: int
    username: str

# Password utilities
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)

# Session and anti-forgery tokens
def generate_session_id() -> str:
    return secrets.token_urlsafe(32)

def generate_csrf_token() -> str:
    return secrets.token_urlsafe(32)

def verify_csrf_token(submitted: Optional[str], expected: Optional[str]) -> bool:
    """Constant-time comparison of a submitted token with the session's token."""
    if not submitted or not expected:
        return False
    return secrets.compare_digest(submitted, expected)

# Input sanitation
def strip_markup(value: Optional[str]) -> str:
    """Trim a form value and remove any HTML tags from it."""
    if value is None:
        return ""
    return Markup(value.strip()).striptags()
