from sqlalchemy.orm import Session as DBSession
from typing import Optional
import logging

from ..core.config import settings
from ..core.exceptions import AuthError, ConflictError, NotFoundError, ValidationError
from ..core.messages import get_message
from ..core.security import Identity, get_password_hash, verify_password
from ..core.sessions import Session
from ..models.user import User
from ..repositories.user_repository import UserRepository
from ..schemas.user import UserRead
from .validation import ensure_max_length

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, db: DBSession):
        self.users = UserRepository(db)

    def _check_password_length(self, password: str):
        if len(password) < settings.PASSWORD_MIN_LENGTH:
            raise ValidationError(
                get_message("password_too_short", min_length=settings.PASSWORD_MIN_LENGTH)
            )

    def register(self, username: Optional[str], password: Optional[str]) -> UserRead:
        """Register a new user."""
        username = (username or "").strip()
        password = password or ""

        if not username or not password:
            raise ValidationError(get_message("credentials_required"))
        ensure_max_length(username, User, "username", "field_username")
        self._check_password_length(password)

        # Pre-check; the unique constraint stays authoritative
        if self.users.get_by_username(username):
            raise ConflictError(get_message("username_taken"))

        user = self.users.create(username, get_password_hash(password))
        logger.info(f"Registered user {user.id} ({user.username})")
        return user

    def login(self, username: Optional[str], password: Optional[str]) -> Identity:
        """Verify credentials and return the identity to store in the session."""
        user = self.users.get_by_username((username or "").strip())

        if not user or not verify_password(password or "", user.password_hash):
            logger.info(f"Failed login attempt for username '{username}'")
            raise AuthError(get_message("invalid_credentials"))

        logger.info(f"User {user.id} logged in")
        return Identity(user_id=user.id, username=user.username)

    def logout(self, session: Session):
        """Destroy the session unconditionally."""
        user_id = session.get("user_id")
        session.destroy()
        if user_id is not None:
            logger.info(f"User {user_id} logged out")

    def get_profile(self, identity: Identity) -> UserRead:
        user = self.users.get(identity.user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(
        self,
        identity: Identity,
        new_username: Optional[str] = None,
        current_password: Optional[str] = None,
        new_password: Optional[str] = None,
    ) -> UserRead:
        """Change the caller's username and/or password."""
        user = self.get_profile(identity)
        changes = {}

        if new_password:
            if not current_password or not verify_password(current_password, user.password_hash):
                raise AuthError(get_message("current_password_incorrect"))
            self._check_password_length(new_password)
            changes["password_hash"] = get_password_hash(new_password)

        new_username = (new_username or "").strip()
        if new_username and new_username != user.username:
            ensure_max_length(new_username, User, "username", "field_username")
            existing = self.users.get_by_username(new_username)
            if existing and existing.id != user.id:
                raise ConflictError(get_message("username_taken"))
            changes["username"] = new_username

        if not changes:
            return user

        updated = self.users.update(user.id, **changes)
        if not updated:
            raise NotFoundError("User not found")
        logger.info(f"User {user.id} updated profile fields: {sorted(changes)}")
        return updated

    def delete_account(self, identity: Identity, session: Session):
        """Delete the caller's account and end the session."""
        self.users.delete(identity.user_id)
        session.destroy()
        logger.info(f"User {identity.user_id} deleted their account")
