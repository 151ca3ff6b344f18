"""
Task API endpoints: single tasks, flat listing and the grouped views
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from taskboard.api.deps import get_current_user_id, get_db, get_pagination
from taskboard.api.responses import success_response
from taskboard.api.schemas import TaskCreateRequest, TaskResponse, TaskTimeRequest, TaskUpdateRequest, task_group_data
from taskboard.application.tasks import (
    ArchiveTaskUseCase, CompleteTaskUseCase, CreateTaskUseCase, MoveTaskToAnotherHeadingUseCase,
    MoveTaskToAnotherListUseCase, TaskReadService, UpdateTaskTimeUseCase, UpdateTaskUseCase,
)
from taskboard.domain.pagination import Pagination
from taskboard.domain.task import TaskGroup
from taskboard.errors import EmptyQueryHeadingID, EmptyQueryListID


router = APIRouter(prefix="/user/tasks", tags=["tasks"])


# === Helpers ===

def create_task(db: Session, user_id: str, req: TaskCreateRequest,
                list_id: str | None = None, heading_id: str | None = None):
    """Shared by every "create task" route (default list, list, heading)"""
    task = CreateTaskUseCase(db).execute(
        user_id=user_id,
        title=req.title,
        description=req.description,
        start_date=req.start_date,
        deadline=req.deadline,
        start_time=req.start_time,
        end_time=req.end_time,
        tags=req.tags,
        list_id=list_id,
        heading_id=heading_id,
    )
    return success_response("task created", TaskResponse.model_validate(task), code=201)


def groups_response(description: str, groups: list[TaskGroup]):
    return success_response(description, [task_group_data(g) for g in groups])


# === Listings ===

@router.get("")
def get_tasks(
    pgn: Pagination = Depends(get_pagination),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    tasks = TaskReadService(db).get_tasks_by_user_id(user_id, pgn)
    return success_response("tasks received", [TaskResponse.model_validate(t) for t in tasks])


@router.get("/today")
def get_tasks_for_today(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Tasks starting today, grouped by list"""
    return groups_response("tasks for today received", TaskReadService(db).get_tasks_for_today(user_id))


@router.get("/upcoming")
def get_upcoming_tasks(
    pgn: Pagination = Depends(get_pagination),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Tasks starting after today, grouped by start_date"""
    return groups_response("upcoming tasks received", TaskReadService(db).get_upcoming_tasks(user_id, pgn))


@router.get("/overdue")
def get_overdue_tasks(
    pgn: Pagination = Depends(get_pagination),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return groups_response("overdue tasks received", TaskReadService(db).get_overdue_tasks(user_id, pgn))


@router.get("/someday")
def get_tasks_for_someday(
    pgn: Pagination = Depends(get_pagination),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Tasks without start_date and without a past deadline, grouped by list"""
    return groups_response("tasks for someday received", TaskReadService(db).get_tasks_for_someday(user_id, pgn))


@router.get("/completed")
def get_completed_tasks(
    pgn: Pagination = Depends(get_pagination),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return groups_response("completed tasks received", TaskReadService(db).get_completed_tasks(user_id, pgn))


@router.get("/archived")
def get_archived_tasks(
    pgn: Pagination = Depends(get_pagination),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return groups_response("archived tasks received", TaskReadService(db).get_archived_tasks(user_id, pgn))


# === Single task ===

@router.get("/{task_id}")
def get_task(task_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    task = TaskReadService(db).get_task_by_id(task_id, user_id)
    return success_response("task received", TaskResponse.model_validate(task))


@router.patch("/{task_id}")
def update_task(
    task_id: str,
    req: TaskUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    task = UpdateTaskUseCase(db).execute(task_id, user_id, req.model_dump(exclude_unset=True))
    return success_response("task updated", TaskResponse.model_validate(task))


@router.delete("/{task_id}")
def delete_task(task_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Deleting a task archives it"""
    ArchiveTaskUseCase(db).execute(task_id, user_id)
    return success_response("task archived", {"id": task_id})


@router.patch("/{task_id}/time")
def update_task_time(
    task_id: str,
    req: TaskTimeRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    task = UpdateTaskTimeUseCase(db).execute(task_id, user_id, req.start_time, req.end_time)
    return success_response("task time updated", TaskResponse.model_validate(task))


@router.patch("/{task_id}/move/list")
def move_task_to_another_list(
    task_id: str,
    list_id: str | None = Query(None),
    heading_id: str | None = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    if not list_id:
        raise EmptyQueryListID()
    task = MoveTaskToAnotherListUseCase(db).execute(task_id, user_id, list_id, heading_id or None)
    return success_response("task moved to another list", TaskResponse.model_validate(task))


@router.patch("/{task_id}/move/heading")
def move_task_to_another_heading(
    task_id: str,
    heading_id: str | None = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    if not heading_id:
        raise EmptyQueryHeadingID()
    task = MoveTaskToAnotherHeadingUseCase(db).execute(task_id, user_id, heading_id)
    return success_response("task moved to another heading", TaskResponse.model_validate(task))


@router.patch("/{task_id}/complete")
def complete_task(task_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    task = CompleteTaskUseCase(db).execute(task_id, user_id)
    return success_response("task completed", TaskResponse.model_validate(task))


@router.patch("/{task_id}/archive")
def archive_task(task_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    ArchiveTaskUseCase(db).execute(task_id, user_id)
    return success_response("task archived", {"id": task_id})
