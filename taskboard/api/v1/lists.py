"""
List API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taskboard.api.deps import get_current_user_id, get_db
from taskboard.api.responses import success_response
from taskboard.api.schemas import ListResponse, TaskCreateRequest, TaskResponse, TitleRequest
from taskboard.api.v1.tasks import create_task
from taskboard.application.lists import CreateListUseCase, DeleteListUseCase, ListReadService, UpdateListUseCase
from taskboard.application.tasks import TaskReadService


router = APIRouter(prefix="/user/lists", tags=["lists"])


@router.get("")
def get_lists(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    lists = ListReadService(db).get_lists_by_user_id(user_id)
    return success_response("lists received", [ListResponse.model_validate(l) for l in lists])


@router.post("")
def create_list(req: TitleRequest, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    list_ = CreateListUseCase(db).execute(user_id, req.title)
    return success_response("list created", ListResponse.model_validate(list_), code=201)


@router.get("/default")
def get_default_list(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    list_ = ListReadService(db).get_default_list(user_id)
    return success_response("default list received", ListResponse.model_validate(list_))


@router.post("/default")
def create_task_in_default_list(
    req: TaskCreateRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Create a task in the Inbox default heading"""
    return create_task(db, user_id, req)


@router.get("/{list_id}")
def get_list(list_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    list_ = ListReadService(db).get_list_by_id(list_id, user_id)
    return success_response("list received", ListResponse.model_validate(list_))


@router.patch("/{list_id}")
def update_list(
    list_id: str,
    req: TitleRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    list_ = UpdateListUseCase(db).execute(list_id, user_id, req.title)
    return success_response("list updated", ListResponse.model_validate(list_))


@router.delete("/{list_id}")
def delete_list(list_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Delete a list; its headings go with it and their tasks are archived"""
    DeleteListUseCase(db).execute(list_id, user_id)
    return success_response("list deleted", {"id": list_id})


@router.get("/{list_id}/tasks")
def get_tasks_by_list(list_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    tasks = TaskReadService(db).get_tasks_by_list_id(list_id, user_id)
    return success_response("tasks received", [TaskResponse.model_validate(t) for t in tasks])


@router.post("/{list_id}/tasks")
def create_task_in_list(
    list_id: str,
    req: TaskCreateRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return create_task(db, user_id, req, list_id=list_id)
