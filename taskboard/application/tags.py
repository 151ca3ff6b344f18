"""
Tag use-cases and read service.
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskboard.domain.tag import MAX_TAG_LENGTH, normalize_tags
from taskboard.errors import InvalidData, TagNotFound
from taskboard.infrastructure.db.models import TagModel
from taskboard.infrastructure.repositories.tags import TagRepository

logger = logging.getLogger(__name__)


class EnsureTagsUseCase:
    """
    Create the missing tags of a user (lower-cased). Runs inside the caller's
    transaction, so it never commits.
    """

    def __init__(self, db: Session):
        self.db = db
        self.tags = TagRepository(db)

    def execute(self, user_id: str, titles: list[str] | None) -> list[str]:
        titles = normalize_tags(titles)
        for title in titles:
            if len(title) > MAX_TAG_LENGTH:
                raise InvalidData(f"tag must be at most {MAX_TAG_LENGTH} characters")
            try:
                self.tags.get_tag_id_by_title(title, user_id)
            except TagNotFound:
                self._create(user_id, title)
        return titles

    def _create(self, user_id: str, title: str) -> None:
        """Insert under a savepoint; a concurrent insert of the same title wins"""
        try:
            with self.db.begin_nested():
                tag_id = self.tags.create_tag(user_id, title)
        except IntegrityError:
            tag_id = self.tags.get_tag_id_by_title(title, user_id)
            logger.debug("tag created concurrently tag_id=%s user_id=%s", tag_id, user_id)
            return
        logger.debug("tag created tag_id=%s user_id=%s", tag_id, user_id)


class TagReadService:
    def __init__(self, db: Session):
        self.db = db
        self.tags = TagRepository(db)

    def get_tags_by_user_id(self, user_id: str) -> list[TagModel]:
        return self.tags.get_tags_by_user_id(user_id)

    def get_tags_by_task_id(self, task_id: str, user_id: str) -> list[str]:
        return self.tags.get_tags_by_task_id(task_id, user_id)
