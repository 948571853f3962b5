from sqlalchemy.orm import Session as DBSession
from typing import List, Optional

from ..core.exceptions import ValidationError
from ..core.messages import get_message
from ..core.security import strip_markup
from ..models.task import Task
from ..repositories.task_repository import TaskRepository
from ..schemas.task import TaskRead
from .validation import ensure_max_length

class TaskService:
    def __init__(self, db: DBSession):
        self.tasks = TaskRepository(db)

    def list(self, owner_id: int) -> List[TaskRead]:
        return self.tasks.list_for_owner(owner_id)

    def create(self, owner_id: int, title: Optional[str], description: Optional[str] = None) -> TaskRead:
        title = strip_markup(title)
        if not title:
            raise ValidationError(get_message("title_required"))
        ensure_max_length(title, Task, "title", "field_title")
        description = strip_markup(description) or None
        return self.tasks.create(owner_id, title, description)
