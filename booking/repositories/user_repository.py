from typing import Optional
from sqlalchemy.orm import Session

from ..core.messages import get_message
from ..models.user import User
from ..schemas.user import UserRead
from .base import store_operation

class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[UserRead]:
        with store_operation(self.db, "user lookup"):
            user = self.db.get(User, user_id)
        return UserRead.model_validate(user) if user else None

    def get_by_username(self, username: str) -> Optional[UserRead]:
        with store_operation(self.db, "user lookup"):
            user = self.db.query(User).filter(User.username == username).first()
        return UserRead.model_validate(user) if user else None

    def create(self, username: str, password_hash: str) -> UserRead:
        user = User(username=username, password_hash=password_hash)
        with store_operation(self.db, "user creation", get_message("username_taken")):
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        return UserRead.model_validate(user)

    def update(self, user_id: int, **fields) -> Optional[UserRead]:
        with store_operation(self.db, "user update", get_message("username_taken")):
            user = self.db.get(User, user_id)
            if not user:
                return None
            for name, value in fields.items():
                setattr(user, name, value)
            self.db.commit()
            self.db.refresh(user)
        return UserRead.model_validate(user)

    def delete(self, user_id: int) -> bool:
        with store_operation(self.db, "user deletion"):
            user = self.db.get(User, user_id)
            if not user:
                return False
            # ORM cascade removes the user's appointments and tasks
            self.db.delete(user)
            self.db.commit()
        return True
