"""
Task storage: point reads, flat and grouped views, mutations

Grouped views run a fixed number of statements (groups, member tasks, member
tag titles) and are assembled here, so the same code serves PostgreSQL and
SQLite. Lists and headings keep their group even when no task matches.
"""
from datetime import date, timedelta
from typing import Any, Callable

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskboard.domain import clock
from taskboard.domain.pagination import Pagination
from taskboard.domain.statuses import CLOSED_STATUSES
from taskboard.domain.task import TaskGroup, TaskView, is_overdue
from taskboard.errors import FailedToCreateTask, HeadingNotFound, ListNotFound, NoTasksFound, TaskNotFound
from taskboard.infrastructure.db.models import HeadingModel, ListModel, StatusModel, TaskModel
from taskboard.infrastructure.repositories.tags import TagRepository


def _foreign_key_error(exc: IntegrityError) -> Exception:
    message = str(exc.orig).lower()
    if "fk_tasks_heading_id" in message or "heading_id" in message:
        return HeadingNotFound()
    if "fk_tasks_list_id" in message or "list_id" in message:
        return ListNotFound()
    return FailedToCreateTask()


class TaskRepository:
    def __init__(self, db: Session):
        self.db = db
        self.tags = TagRepository(db)

    # ── Helpers ──

    def _query(self, user_id: str):
        return (
            self.db.query(TaskModel, StatusModel.title)
            .join(StatusModel, StatusModel.id == TaskModel.status_id)
            .filter(TaskModel.user_id == user_id)
        )

    def _live(self, user_id: str):
        return self._query(user_id).filter(TaskModel.deleted_at.is_(None))

    def _live_tasks(self, user_id: str):
        return self.db.query(TaskModel).filter(
            TaskModel.user_id == user_id,
            TaskModel.deleted_at.is_(None),
        )

    def _views(self, rows: list[Any], user_id: str) -> list[TaskView]:
        today = clock.utc_today()
        tags = self.tags.get_tags_by_task_ids([task.id for task, _ in rows], user_id)
        return [
            TaskView(
                id=task.id,
                title=task.title,
                description=task.description,
                start_date=task.start_date,
                deadline=task.deadline,
                start_time=clock.as_utc(task.start_time),
                end_time=clock.as_utc(task.end_time),
                status_id=task.status_id,
                status=status,
                list_id=task.list_id,
                heading_id=task.heading_id,
                user_id=task.user_id,
                created_at=clock.as_utc(task.created_at),
                updated_at=clock.as_utc(task.updated_at),
                deleted_at=clock.as_utc(task.deleted_at),
                tags=tags.get(task.id, []),
                overdue=is_overdue(task.deadline, status, today),
            )
            for task, status in rows
        ]

    def _not_closed(self):
        return StatusModel.title.notin_([s.value for s in CLOSED_STATUSES])

    def _update_live(self, task_id: str, user_id: str, values: dict) -> None:
        values = {**values, TaskModel.updated_at: clock.utc_now()}
        count = self._live_tasks(user_id).filter(TaskModel.id == task_id).update(values)
        if count == 0:
            raise TaskNotFound()

    def _group_by_lists(self, user_id: str, pgn: Pagination | None, *criteria) -> list[TaskGroup]:
        if pgn is not None and pgn.limit == 0:
            return []

        lists_query = self.db.query(ListModel).filter(
            ListModel.user_id == user_id,
            ListModel.deleted_at.is_(None),
        )
        if pgn is not None and pgn.after_id:
            lists_query = lists_query.filter(ListModel.id > pgn.after_id)
        lists_query = lists_query.order_by(ListModel.id)
        if pgn is not None:
            lists_query = lists_query.limit(pgn.limit)
        lists = lists_query.all()
        if not lists:
            raise NoTasksFound()

        groups = {
            l.id: TaskGroup(list_id=l.id, title=l.title, is_default=l.is_default)
            for l in lists
        }
        rows = (
            self._live(user_id)
            .filter(TaskModel.list_id.in_(list(groups)), *criteria)
            .order_by(TaskModel.id)
            .all()
        )
        for view in self._views(rows, user_id):
            groups[view.list_id].tasks.append(view)
        return list(groups.values())

    def _group_by_month(
        self,
        rows: list[Any],
        user_id: str,
        key: Callable[[TaskView], Any],
        limit: int,
    ) -> list[TaskGroup]:
        groups: list[TaskGroup] = []
        for view in self._views(rows, user_id):
            month = clock.month_start(key(view))
            if not groups or groups[-1].month != month:
                if len(groups) == limit:
                    break
                groups.append(TaskGroup(month=month))
            groups[-1].tasks.append(view)
        if not groups:
            raise NoTasksFound()
        return groups

    # ── Create ──

    def create_task(self, task: TaskModel) -> None:
        """
        Insert one task; list_id, heading_id, user_id and status_id must be set

        Raises:
            HeadingNotFound / ListNotFound: foreign key violation on that column
            FailedToCreateTask: any other integrity failure
        """
        self.db.add(task)
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise _foreign_key_error(exc) from exc

    # ── Reads ──

    def get_task_by_id(self, task_id: str, user_id: str) -> TaskView:
        row = self._live(user_id).filter(TaskModel.id == task_id).first()
        if row is None:
            raise TaskNotFound()
        return self._views([row], user_id)[0]

    def get_tasks_by_user_id(self, user_id: str, pgn: Pagination) -> list[TaskView]:
        if pgn.limit == 0:
            return []
        query = self._live(user_id)
        if pgn.after_id:
            query = query.filter(TaskModel.id > pgn.after_id)
        rows = query.order_by(TaskModel.id).limit(pgn.limit).all()
        if not rows:
            raise NoTasksFound()
        return self._views(rows, user_id)

    def get_tasks_by_list_id(self, list_id: str, user_id: str) -> list[TaskView]:
        rows = self._live(user_id).filter(TaskModel.list_id == list_id).order_by(TaskModel.id).all()
        if not rows:
            raise NoTasksFound()
        return self._views(rows, user_id)

    def get_tasks_grouped_by_headings(self, list_id: str, user_id: str) -> list[TaskGroup]:
        headings = (
            self.db.query(HeadingModel)
            .filter(
                HeadingModel.list_id == list_id,
                HeadingModel.user_id == user_id,
                HeadingModel.deleted_at.is_(None),
            )
            .order_by(HeadingModel.id)
            .all()
        )
        if not headings:
            raise NoTasksFound()

        groups = {
            h.id: TaskGroup(heading_id=h.id, list_id=h.list_id, title=h.title, is_default=h.is_default)
            for h in headings
        }
        rows = (
            self._live(user_id)
            .filter(TaskModel.heading_id.in_(list(groups)))
            .order_by(TaskModel.id)
            .all()
        )
        for view in self._views(rows, user_id):
            groups[view.heading_id].tasks.append(view)
        return list(groups.values())

    def get_tasks_for_today(self, user_id: str) -> list[TaskGroup]:
        return self._group_by_lists(
            user_id, None,
            TaskModel.start_date == clock.utc_today(),
            self._not_closed(),
        )

    def get_upcoming_tasks(self, user_id: str, pgn: Pagination) -> list[TaskGroup]:
        if pgn.limit == 0:
            return []
        lower = clock.utc_today() + timedelta(days=1)
        if pgn.after_date is not None and pgn.after_date > lower:
            lower = pgn.after_date

        dates = [
            row[0]
            for row in (
                self.db.query(TaskModel.start_date)
                .filter(
                    TaskModel.user_id == user_id,
                    TaskModel.deleted_at.is_(None),
                    TaskModel.start_date >= lower,
                )
                .distinct()
                .order_by(TaskModel.start_date)
                .limit(pgn.limit)
                .all()
            )
        ]
        if not dates:
            raise NoTasksFound()

        groups: dict[date, TaskGroup] = {d: TaskGroup(start_date=d) for d in dates}
        rows = (
            self._live(user_id)
            .filter(TaskModel.start_date.in_(dates))
            .order_by(TaskModel.start_date, TaskModel.id)
            .all()
        )
        for view in self._views(rows, user_id):
            groups[view.start_date].tasks.append(view)
        return list(groups.values())

    def get_overdue_tasks(self, user_id: str, pgn: Pagination) -> list[TaskGroup]:
        return self._group_by_lists(
            user_id, pgn,
            TaskModel.deadline <= clock.utc_today(),
            self._not_closed(),
        )

    def get_tasks_for_someday(self, user_id: str, pgn: Pagination) -> list[TaskGroup]:
        today = clock.utc_today()
        return self._group_by_lists(
            user_id, pgn,
            TaskModel.start_date.is_(None),
            (TaskModel.deadline.is_(None)) | (TaskModel.deadline > today),
        )

    def get_completed_tasks(self, user_id: str, pgn: Pagination, completed_status_id: int) -> list[TaskGroup]:
        """Completed tasks grouped by the month of their last update"""
        if pgn.limit == 0:
            return []
        query = self._query(user_id).filter(TaskModel.status_id == completed_status_id)
        if pgn.after_date is not None:
            query = query.filter(
                TaskModel.updated_at >= clock.start_of_day(clock.next_month_start(pgn.after_date))
            )
        rows = query.order_by(TaskModel.updated_at, TaskModel.id).all()
        return self._group_by_month(rows, user_id, lambda v: v.updated_at, pgn.limit)

    def get_archived_tasks(self, user_id: str, pgn: Pagination, archived_status_id: int) -> list[TaskGroup]:
        """Archived tasks grouped by the month they were archived in"""
        if pgn.limit == 0:
            return []
        archived_at = func.coalesce(TaskModel.deleted_at, TaskModel.updated_at)
        query = self._query(user_id).filter(TaskModel.status_id == archived_status_id)
        if pgn.after_date is not None:
            query = query.filter(
                archived_at >= clock.start_of_day(clock.next_month_start(pgn.after_date))
            )
        rows = query.order_by(archived_at, TaskModel.id).all()
        return self._group_by_month(rows, user_id, lambda v: v.deleted_at or v.updated_at, pgn.limit)

    # ── Mutations ──

    def update_task(self, task_id: str, user_id: str, changes: dict[str, Any]) -> None:
        """
        Partial update: only the given columns are touched, updated_at is always bumped
        """
        values = {getattr(TaskModel, column): value for column, value in changes.items()}
        self._update_live(task_id, user_id, values)

    def update_task_time(self, task_id: str, user_id: str, start_time, end_time, status_id: int) -> None:
        self._update_live(task_id, user_id, {
            TaskModel.start_time: start_time,
            TaskModel.end_time: end_time,
            TaskModel.status_id: status_id,
        })

    def move_task_to_another_list(self, task_id: str, user_id: str, list_id: str, heading_id: str) -> None:
        self._update_live(task_id, user_id, {
            TaskModel.list_id: list_id,
            TaskModel.heading_id: heading_id,
        })

    def move_task_to_another_heading(self, task_id: str, user_id: str, heading_id: str, list_id: str) -> None:
        self._update_live(task_id, user_id, {
            TaskModel.heading_id: heading_id,
            TaskModel.list_id: list_id,
        })

    def mark_as_completed(self, task_id: str, user_id: str, status_id: int) -> None:
        self._update_live(task_id, user_id, {TaskModel.status_id: status_id})

    def mark_as_archived(self, task_id: str, user_id: str, status_id: int) -> None:
        now = clock.utc_now()
        count = self._live_tasks(user_id).filter(TaskModel.id == task_id).update({
            TaskModel.status_id: status_id,
            TaskModel.deleted_at: now,
        })
        if count == 0:
            raise TaskNotFound()

    def mark_tasks_as_archived_by_heading_ids(self, heading_ids: list[str], user_id: str, status_id: int) -> int:
        """
        Archive every live task under the given headings

        Returns:
            Number of archived tasks
        """
        if not heading_ids:
            return 0
        return self._live_tasks(user_id).filter(TaskModel.heading_id.in_(heading_ids)).update(
            {TaskModel.status_id: status_id, TaskModel.deleted_at: clock.utc_now()}
        )

    def mark_tasks_as_archived_by_heading_id(self, heading_id: str, user_id: str, status_id: int) -> int:
        return self.mark_tasks_as_archived_by_heading_ids([heading_id], user_id, status_id)
