"""
List use-cases and read service.

Rules:
  - creating a list also creates its default heading ("Default")
  - every user has exactly one default list ("Inbox"); it cannot be deleted
  - deleting a list soft-deletes its headings and archives their tasks
"""
import logging

from sqlalchemy.orm import Session

from taskboard.domain import clock
from taskboard.domain.ids import new_id
from taskboard.domain.list import DEFAULT_HEADING_TITLE, DEFAULT_LIST_TITLE, normalize_title
from taskboard.domain.statuses import TaskStatus
from taskboard.errors import CannotDeleteDefaultList, InvalidData
from taskboard.infrastructure.db.models import HeadingModel, ListModel
from taskboard.infrastructure.db.session import transaction
from taskboard.infrastructure.repositories.headings import HeadingRepository
from taskboard.infrastructure.repositories.lists import ListRepository
from taskboard.infrastructure.repositories.statuses import StatusRepository
from taskboard.infrastructure.repositories.tasks import TaskRepository

logger = logging.getLogger(__name__)


def _new_list(user_id: str, title: str, is_default: bool = False) -> ListModel:
    now = clock.utc_now()
    return ListModel(
        id=new_id(), title=title, user_id=user_id, is_default=is_default,
        created_at=now, updated_at=now,
    )


def _new_default_heading(list_id: str, user_id: str) -> HeadingModel:
    now = clock.utc_now()
    return HeadingModel(
        id=new_id(), title=DEFAULT_HEADING_TITLE, list_id=list_id, user_id=user_id,
        is_default=True, created_at=now, updated_at=now,
    )


# ── Use Cases ──

class CreateListUseCase:
    def __init__(self, db: Session):
        self.db = db
        self.lists = ListRepository(db)
        self.headings = HeadingRepository(db)

    def execute(self, user_id: str, title: str) -> ListModel:
        title = normalize_title(title)
        if not title:
            raise InvalidData("title must not be empty")

        list_ = _new_list(user_id, title)
        with transaction(self.db):
            self.lists.create_list(list_)
            self.headings.create_heading(_new_default_heading(list_.id, user_id))

        logger.info("list created list_id=%s user_id=%s", list_.id, user_id)
        return list_


class CreateDefaultListUseCase:
    """
    Inbox + its default heading. Runs once per user; a second call returns the
    existing Inbox.
    """

    def __init__(self, db: Session):
        self.db = db
        self.lists = ListRepository(db)
        self.headings = HeadingRepository(db)

    def execute(self, user_id: str) -> ListModel:
        with transaction(self.db):
            existing = self.lists.find_default_list(user_id)
            if existing is not None:
                return existing
            list_ = _new_list(user_id, DEFAULT_LIST_TITLE, is_default=True)
            self.lists.create_list(list_)
            self.headings.create_heading(_new_default_heading(list_.id, user_id))

        logger.info("default list created list_id=%s user_id=%s", list_.id, user_id)
        return list_


class UpdateListUseCase:
    def __init__(self, db: Session):
        self.db = db
        self.lists = ListRepository(db)

    def execute(self, list_id: str, user_id: str, title: str) -> ListModel:
        title = normalize_title(title)
        if not title:
            raise InvalidData("title must not be empty")

        with transaction(self.db):
            self.lists.update_list(list_id, user_id, title)
        return self.lists.get_list_by_id(list_id, user_id)


class DeleteListUseCase:
    def __init__(self, db: Session):
        self.db = db
        self.lists = ListRepository(db)
        self.headings = HeadingRepository(db)
        self.tasks = TaskRepository(db)
        self.statuses = StatusRepository(db)

    def execute(self, list_id: str, user_id: str) -> None:
        with transaction(self.db):
            list_ = self.lists.get_list_by_id(list_id, user_id, for_update=True)
            if list_.is_default:
                raise CannotDeleteDefaultList()

            archived_id = self.statuses.get_status_id(TaskStatus.ARCHIVED)
            self.lists.delete_list(list_id, user_id)
            heading_ids = self.headings.delete_headings_by_list_id(list_id, user_id)
            archived = self.tasks.mark_tasks_as_archived_by_heading_ids(heading_ids, user_id, archived_id)

        logger.info(
            "list deleted list_id=%s user_id=%s headings=%d archived_tasks=%d",
            list_id, user_id, len(heading_ids), archived,
        )


# ── Read Service ──

class ListReadService:
    def __init__(self, db: Session):
        self.db = db
        self.lists = ListRepository(db)

    def get_list_by_id(self, list_id: str, user_id: str) -> ListModel:
        return self.lists.get_list_by_id(list_id, user_id)

    def get_lists_by_user_id(self, user_id: str) -> list[ListModel]:
        return self.lists.get_lists_by_user_id(user_id)

    def get_default_list(self, user_id: str) -> ListModel:
        return self.lists.get_default_list(user_id)
