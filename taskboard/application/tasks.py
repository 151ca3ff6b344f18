"""
Task use-cases and read service.

Multi-table writes (tag reconcile + task row + tag links) run in one
transaction. Reads return TaskView / TaskGroup with tags and `overdue` filled in.
"""
import logging
from datetime import date, datetime
from typing import Any

from sqlalchemy.orm import Session

from taskboard.domain import clock
from taskboard.domain.ids import new_id
from taskboard.domain.list import normalize_title
from taskboard.domain.pagination import Pagination
from taskboard.domain.statuses import TaskStatus
from taskboard.domain.tag import diff_tags
from taskboard.domain.task import TaskGroup, TaskView, status_for_time_range, validate_time_range
from taskboard.errors import EmptyData, HeadingNotFound, InvalidData
from taskboard.infrastructure.db.models import TaskModel
from taskboard.infrastructure.db.session import transaction
from taskboard.infrastructure.repositories.headings import HeadingRepository
from taskboard.infrastructure.repositories.lists import ListRepository
from taskboard.infrastructure.repositories.statuses import StatusRepository
from taskboard.infrastructure.repositories.tags import TagRepository
from taskboard.infrastructure.repositories.tasks import TaskRepository
from taskboard.application.tags import EnsureTagsUseCase

logger = logging.getLogger(__name__)

# Columns UpdateTaskUseCase may touch
UPDATABLE_FIELDS = ("title", "description", "start_date", "deadline", "list_id", "heading_id", "tags")


class _TaskUseCase:
    def __init__(self, db: Session):
        self.db = db
        self.tasks = TaskRepository(db)
        self.tags = TagRepository(db)
        self.lists = ListRepository(db)
        self.headings = HeadingRepository(db)
        self.statuses = StatusRepository(db)

    def _resolve_placement(self, user_id: str, list_id: str | None, heading_id: str | None) -> tuple[str, str]:
        """
        Pick (list_id, heading_id) for a task

          neither given  -> Inbox + its default heading
          list only      -> that list's default heading
          heading given  -> the heading's list; must match list_id when both are given

        The heading row is locked so a concurrent heading delete cannot slip in.
        """
        if heading_id is None:
            if list_id is None:
                list_id = self.lists.get_default_list_id(user_id)
            else:
                self.lists.get_list_by_id(list_id, user_id, for_update=True)
            heading_id = self.headings.get_default_heading_id(list_id, user_id)

        heading = self.headings.get_heading_by_id(heading_id, user_id, for_update=True)
        if list_id is not None and heading.list_id != list_id:
            raise HeadingNotFound()
        return heading.list_id, heading.id


# ── Use Cases ──

class CreateTaskUseCase(_TaskUseCase):
    def execute(
        self,
        user_id: str,
        title: str,
        description: str | None = None,
        start_date: date | None = None,
        deadline: date | None = None,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        tags: list[str] | None = None,
        list_id: str | None = None,
        heading_id: str | None = None,
    ) -> TaskView:
        """
        Create a task with status "Not started"

        Without list_id/heading_id the task lands in the Inbox default heading.

        Raises:
            DefaultListNotFound, ListNotFound, HeadingNotFound, InvalidTaskTimeRange
        """
        title = normalize_title(title)
        if not title:
            raise InvalidData("title must not be empty")
        validate_time_range(start_time, end_time)

        with transaction(self.db):
            list_id, heading_id = self._resolve_placement(user_id, list_id, heading_id)
            status_id = self.statuses.get_status_id(TaskStatus.NOT_STARTED)
            titles = EnsureTagsUseCase(self.db).execute(user_id, tags)

            now = clock.utc_now()
            task_id = new_id()
            task = TaskModel(
                id=task_id,
                title=title,
                description=description,
                start_date=start_date,
                deadline=deadline,
                start_time=start_time,
                end_time=end_time,
                status_id=status_id,
                list_id=list_id,
                heading_id=heading_id,
                user_id=user_id,
                created_at=now,
                updated_at=now,
            )
            self.tasks.create_task(task)
            self.tags.link_tags_to_task(task_id, user_id, titles)

        logger.info("task created task_id=%s list_id=%s user_id=%s", task_id, list_id, user_id)
        return self.tasks.get_task_by_id(task_id, user_id)


class UpdateTaskUseCase(_TaskUseCase):
    def execute(self, task_id: str, user_id: str, changes: dict[str, Any]) -> TaskView:
        """
        Partial update

        Only keys present in `changes` are applied; None clears nullable
        fields. `tags` replaces the task's tag set (None / [] removes all).
        """
        changes = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        if not changes:
            raise EmptyData()

        if "title" in changes:
            changes["title"] = normalize_title(changes["title"])
            if not changes["title"]:
                raise InvalidData("title must not be empty")

        with transaction(self.db):
            current = self.tasks.get_task_by_id(task_id, user_id)

            if "list_id" in changes or "heading_id" in changes:
                list_id = changes.pop("list_id", None)
                heading_id = changes.pop("heading_id", None)
                if heading_id is None and list_id == current.list_id:
                    heading_id = current.heading_id
                if list_id is not None or heading_id is not None:
                    changes["list_id"], changes["heading_id"] = self._resolve_placement(user_id, list_id, heading_id)

            to_add: list[str] = []
            to_remove: list[str] = []
            if "tags" in changes:
                to_add, to_remove = diff_tags(current.tags, changes.pop("tags") or [])
                EnsureTagsUseCase(self.db).execute(user_id, to_add)

            self.tasks.update_task(task_id, user_id, changes)
            self.tags.unlink_tags_from_task(task_id, user_id, to_remove)
            self.tags.link_tags_to_task(task_id, user_id, to_add)

        logger.info("task updated task_id=%s user_id=%s fields=%s", task_id, user_id, sorted(changes))
        return self.tasks.get_task_by_id(task_id, user_id)


class UpdateTaskTimeUseCase(_TaskUseCase):
    def execute(self, task_id: str, user_id: str,
                start_time: datetime | None, end_time: datetime | None) -> TaskView:
        """
        Set or clear the time range; the status follows its shape

        Raises:
            InvalidTaskTimeRange: exactly one of the two times, or start >= end
        """
        status = status_for_time_range(start_time, end_time)
        with transaction(self.db):
            status_id = self.statuses.get_status_id(status)
            self.tasks.update_task_time(task_id, user_id, start_time, end_time, status_id)

        logger.info("task time updated task_id=%s user_id=%s status=%s", task_id, user_id, status.value)
        return self.tasks.get_task_by_id(task_id, user_id)


class MoveTaskToAnotherListUseCase(_TaskUseCase):
    def execute(self, task_id: str, user_id: str, list_id: str, heading_id: str | None = None) -> TaskView:
        """Move a task to a list; without heading_id it lands in the list's default heading"""
        with transaction(self.db):
            list_id, heading_id = self._resolve_placement(user_id, list_id, heading_id)
            self.tasks.move_task_to_another_list(task_id, user_id, list_id, heading_id)

        logger.info("task moved task_id=%s list_id=%s user_id=%s", task_id, list_id, user_id)
        return self.tasks.get_task_by_id(task_id, user_id)


class MoveTaskToAnotherHeadingUseCase(_TaskUseCase):
    def execute(self, task_id: str, user_id: str, heading_id: str) -> TaskView:
        """Move a task under another heading; the task follows the heading's list"""
        with transaction(self.db):
            heading = self.headings.get_heading_by_id(heading_id, user_id, for_update=True)
            self.tasks.move_task_to_another_heading(task_id, user_id, heading.id, heading.list_id)

        logger.info("task moved task_id=%s heading_id=%s user_id=%s", task_id, heading_id, user_id)
        return self.tasks.get_task_by_id(task_id, user_id)


class CompleteTaskUseCase(_TaskUseCase):
    def execute(self, task_id: str, user_id: str) -> TaskView:
        """Status -> Completed; the task stays live"""
        with transaction(self.db):
            status_id = self.statuses.get_status_id(TaskStatus.COMPLETED)
            self.tasks.mark_as_completed(task_id, user_id, status_id)

        logger.info("task completed task_id=%s user_id=%s", task_id, user_id)
        return self.tasks.get_task_by_id(task_id, user_id)


class ArchiveTaskUseCase(_TaskUseCase):
    def execute(self, task_id: str, user_id: str) -> None:
        """Status -> Archived and soft delete"""
        with transaction(self.db):
            status_id = self.statuses.get_status_id(TaskStatus.ARCHIVED)
            self.tasks.mark_as_archived(task_id, user_id, status_id)

        logger.info("task archived task_id=%s user_id=%s", task_id, user_id)


class ArchiveTasksByHeadingUseCase(_TaskUseCase):
    def execute(self, heading_id: str, user_id: str) -> int:
        with transaction(self.db):
            status_id = self.statuses.get_status_id(TaskStatus.ARCHIVED)
            count = self.tasks.mark_tasks_as_archived_by_heading_id(heading_id, user_id, status_id)

        logger.info("tasks archived heading_id=%s user_id=%s count=%d", heading_id, user_id, count)
        return count


# ── Read Service ──

class TaskReadService:
    def __init__(self, db: Session):
        self.db = db
        self.tasks = TaskRepository(db)
        self.lists = ListRepository(db)
        self.statuses = StatusRepository(db)

    def get_task_by_id(self, task_id: str, user_id: str) -> TaskView:
        return self.tasks.get_task_by_id(task_id, user_id)

    def get_tasks_by_user_id(self, user_id: str, pgn: Pagination) -> list[TaskView]:
        return self.tasks.get_tasks_by_user_id(user_id, pgn)

    def get_tasks_by_list_id(self, list_id: str, user_id: str) -> list[TaskView]:
        self.lists.get_list_by_id(list_id, user_id)
        return self.tasks.get_tasks_by_list_id(list_id, user_id)

    def get_tasks_grouped_by_headings(self, list_id: str, user_id: str) -> list[TaskGroup]:
        self.lists.get_list_by_id(list_id, user_id)
        return self.tasks.get_tasks_grouped_by_headings(list_id, user_id)

    def get_tasks_for_today(self, user_id: str) -> list[TaskGroup]:
        return self.tasks.get_tasks_for_today(user_id)

    def get_upcoming_tasks(self, user_id: str, pgn: Pagination) -> list[TaskGroup]:
        return self.tasks.get_upcoming_tasks(user_id, pgn)

    def get_overdue_tasks(self, user_id: str, pgn: Pagination) -> list[TaskGroup]:
        return self.tasks.get_overdue_tasks(user_id, pgn)

    def get_tasks_for_someday(self, user_id: str, pgn: Pagination) -> list[TaskGroup]:
        return self.tasks.get_tasks_for_someday(user_id, pgn)

    def get_completed_tasks(self, user_id: str, pgn: Pagination) -> list[TaskGroup]:
        status_id = self.statuses.get_status_id(TaskStatus.COMPLETED)
        return self.tasks.get_completed_tasks(user_id, pgn, status_id)

    def get_archived_tasks(self, user_id: str, pgn: Pagination) -> list[TaskGroup]:
        status_id = self.statuses.get_status_id(TaskStatus.ARCHIVED)
        return self.tasks.get_archived_tasks(user_id, pgn, status_id)
