"""
Heading API endpoints (nested under a list)
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from taskboard.api.deps import get_current_user_id, get_db
from taskboard.api.responses import success_response
from taskboard.api.schemas import HeadingResponse, TaskCreateRequest, TitleRequest
from taskboard.api.v1.tasks import create_task, groups_response
from taskboard.application.headings import (
    CreateHeadingUseCase, DeleteHeadingUseCase, HeadingReadService, MoveHeadingToAnotherListUseCase,
    UpdateHeadingUseCase,
)
from taskboard.application.tasks import TaskReadService
from taskboard.errors import EmptyQueryListID


router = APIRouter(prefix="/user/lists/{list_id}/headings", tags=["headings"])


@router.post("")
def create_heading(
    list_id: str,
    req: TitleRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    heading = CreateHeadingUseCase(db).execute(list_id, user_id, req.title)
    return success_response("heading created", HeadingResponse.model_validate(heading), code=201)


@router.get("")
def get_headings(list_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    headings = HeadingReadService(db).get_headings_by_list_id(list_id, user_id)
    return success_response("headings received", [HeadingResponse.model_validate(h) for h in headings])


@router.get("/tasks")
def get_tasks_grouped_by_headings(
    list_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Every heading of the list with its tasks (empty headings included)"""
    groups = TaskReadService(db).get_tasks_grouped_by_headings(list_id, user_id)
    return groups_response("tasks grouped by headings received", groups)


@router.get("/{heading_id}")
def get_heading(
    list_id: str,
    heading_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    heading = HeadingReadService(db).get_heading_by_id(heading_id, user_id, list_id=list_id)
    return success_response("heading received", HeadingResponse.model_validate(heading))


@router.post("/{heading_id}")
def create_task_in_heading(
    list_id: str,
    heading_id: str,
    req: TaskCreateRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return create_task(db, user_id, req, list_id=list_id, heading_id=heading_id)


@router.patch("/{heading_id}")
def update_heading(
    list_id: str,
    heading_id: str,
    req: TitleRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    heading = UpdateHeadingUseCase(db).execute(heading_id, user_id, req.title, list_id=list_id)
    return success_response("heading updated", HeadingResponse.model_validate(heading))


@router.patch("/{heading_id}/move")
def move_heading(
    list_id: str,
    heading_id: str,
    target_list_id: str | None = Query(None, alias="list_id"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Move a heading and its tasks to the list given in ?list_id="""
    if not target_list_id:
        raise EmptyQueryListID()
    heading = MoveHeadingToAnotherListUseCase(db).execute(heading_id, user_id, target_list_id, list_id=list_id)
    return success_response("heading moved", HeadingResponse.model_validate(heading))


@router.delete("/{heading_id}")
def delete_heading(
    list_id: str,
    heading_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Delete a heading and archive its tasks"""
    DeleteHeadingUseCase(db).execute(heading_id, user_id, list_id=list_id)
    return success_response("heading deleted", {"id": heading_id})
