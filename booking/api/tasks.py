from fastapi import APIRouter, Depends, Form, Request, status
from sqlalchemy.orm import Session

from ..core.database import get_db
from ..core.exceptions import ValidationError
from ..core.security import Identity
from ..services.task_service import TaskService
from .deps import get_current_identity, verify_csrf
from .templating import redirect, render

router = APIRouter(prefix="/tasks", tags=["Tasks"])

@router.get("")
async def list_tasks(
    request: Request,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    tasks = TaskService(db).list(identity.user_id)
    return render(request, "tasks/index.html", {"tasks": tasks})

@router.post("", dependencies=[Depends(verify_csrf)])
async def create_task(
    request: Request,
    title: str = Form(""),
    description: str = Form(""),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    task_service = TaskService(db)
    try:
        task_service.create(identity.user_id, title, description)
    except ValidationError as e:
        return render(
            request, "tasks/index.html",
            {"tasks": task_service.list(identity.user_id), "error": e.message},
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    return redirect("/tasks")
