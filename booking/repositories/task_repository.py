from typing import List, Optional
from sqlalchemy.orm import Session

from ..models.task import Task
from ..schemas.task import TaskRead
from .base import store_operation

class TaskRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_for_owner(self, owner_id: int) -> List[TaskRead]:
        with store_operation(self.db, "task listing"):
            tasks = (
                self.db.query(Task)
                .filter(Task.owner_id == owner_id)
                .order_by(Task.id.asc())
                .all()
            )
        return [TaskRead.model_validate(t) for t in tasks]

    def create(self, owner_id: int, title: str, description: Optional[str] = None) -> TaskRead:
        task = Task(owner_id=owner_id, title=title, description=description)
        with store_operation(self.db, "task creation"):
            self.db.add(task)
            self.db.commit()
            self.db.refresh(task)
        return TaskRead.model_validate(task)
