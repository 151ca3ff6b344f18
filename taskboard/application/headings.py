"""
Heading use-cases and read service.

Rules:
  - the default heading of a list can be neither moved nor deleted
  - moving a heading re-parents its live tasks to the target list
  - deleting a heading archives its live tasks
"""
import logging

from sqlalchemy.orm import Session

from taskboard.domain import clock
from taskboard.domain.ids import new_id
from taskboard.domain.list import normalize_title
from taskboard.errors import CannotDeleteDefaultHeading, CannotMoveDefaultHeading, HeadingNotFound, InvalidData
from taskboard.infrastructure.db.models import HeadingModel
from taskboard.infrastructure.db.session import transaction
from taskboard.infrastructure.repositories.headings import HeadingRepository
from taskboard.infrastructure.repositories.lists import ListRepository
from taskboard.application.tasks import ArchiveTasksByHeadingUseCase

logger = logging.getLogger(__name__)


def _get_in_list(headings: HeadingRepository, heading_id: str, list_id: str | None, user_id: str,
                 for_update: bool = False) -> HeadingModel:
    """Heading lookup, optionally pinned to the list it must belong to"""
    heading = headings.get_heading_by_id(heading_id, user_id, for_update=for_update)
    if list_id is not None and heading.list_id != list_id:
        raise HeadingNotFound()
    return heading


# ── Use Cases ──

class CreateHeadingUseCase:
    def __init__(self, db: Session):
        self.db = db
        self.lists = ListRepository(db)
        self.headings = HeadingRepository(db)

    def execute(self, list_id: str, user_id: str, title: str) -> HeadingModel:
        title = normalize_title(title)
        if not title:
            raise InvalidData("title must not be empty")

        now = clock.utc_now()
        heading = HeadingModel(
            id=new_id(), title=title, list_id=list_id, user_id=user_id,
            is_default=False, created_at=now, updated_at=now,
        )
        with transaction(self.db):
            self.lists.get_list_by_id(list_id, user_id, for_update=True)
            self.headings.create_heading(heading)

        logger.info("heading created heading_id=%s list_id=%s user_id=%s", heading.id, list_id, user_id)
        return heading


class UpdateHeadingUseCase:
    def __init__(self, db: Session):
        self.db = db
        self.headings = HeadingRepository(db)

    def execute(self, heading_id: str, user_id: str, title: str, list_id: str | None = None) -> HeadingModel:
        title = normalize_title(title)
        if not title:
            raise InvalidData("title must not be empty")

        with transaction(self.db):
            _get_in_list(self.headings, heading_id, list_id, user_id, for_update=True)
            self.headings.update_heading(heading_id, user_id, title)
        return self.headings.get_heading_by_id(heading_id, user_id)


class MoveHeadingToAnotherListUseCase:
    def __init__(self, db: Session):
        self.db = db
        self.lists = ListRepository(db)
        self.headings = HeadingRepository(db)

    def execute(self, heading_id: str, user_id: str, target_list_id: str,
                list_id: str | None = None) -> HeadingModel:
        """
        Move a heading (and its live tasks) to another list of the same user

        Raises:
            HeadingNotFound: unknown heading, or not in `list_id` when given
            ListNotFound: target list missing or not owned
            CannotMoveDefaultHeading: heading is its list's default
        """
        with transaction(self.db):
            heading = _get_in_list(self.headings, heading_id, list_id, user_id, for_update=True)
            if heading.is_default:
                raise CannotMoveDefaultHeading()
            self.lists.get_list_by_id(target_list_id, user_id, for_update=True)
            moved = self.headings.move_heading_to_another_list(heading_id, user_id, target_list_id)

        logger.info(
            "heading moved heading_id=%s list_id=%s user_id=%s tasks=%d",
            heading_id, target_list_id, user_id, moved,
        )
        return self.headings.get_heading_by_id(heading_id, user_id)


class DeleteHeadingUseCase:
    def __init__(self, db: Session):
        self.db = db
        self.headings = HeadingRepository(db)

    def execute(self, heading_id: str, user_id: str, list_id: str | None = None) -> None:
        with transaction(self.db):
            heading = _get_in_list(self.headings, heading_id, list_id, user_id, for_update=True)
            if heading.is_default:
                raise CannotDeleteDefaultHeading()
            self.headings.delete_heading(heading_id, user_id)
            ArchiveTasksByHeadingUseCase(self.db).execute(heading_id, user_id)

        logger.info("heading deleted heading_id=%s user_id=%s", heading_id, user_id)


# ── Read Service ──

class HeadingReadService:
    def __init__(self, db: Session):
        self.db = db
        self.lists = ListRepository(db)
        self.headings = HeadingRepository(db)

    def get_heading_by_id(self, heading_id: str, user_id: str, list_id: str | None = None) -> HeadingModel:
        return _get_in_list(self.headings, heading_id, list_id, user_id)

    def get_headings_by_list_id(self, list_id: str, user_id: str) -> list[HeadingModel]:
        self.lists.get_list_by_id(list_id, user_id)
        return self.headings.get_headings_by_list_id(list_id, user_id)
