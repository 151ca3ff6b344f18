"""
Tag storage

Titles are canonicalized to lower case here, on insert and on lookup.
"""
from sqlalchemy import func
from sqlalchemy.orm import Session

from taskboard.domain import clock
from taskboard.domain.ids import new_id
from taskboard.domain.tag import normalize_tag, normalize_tags
from taskboard.errors import NoTagsFound, TagNotFound
from taskboard.infrastructure.db.models import TagModel, TaskTagModel


class TagRepository:
    def __init__(self, db: Session):
        self.db = db

    def _live(self, user_id: str):
        return self.db.query(TagModel).filter(
            TagModel.user_id == user_id,
            TagModel.deleted_at.is_(None),
        )

    def create_tag(self, user_id: str, title: str) -> str:
        now = clock.utc_now()
        tag = TagModel(
            id=new_id(),
            title=normalize_tag(title),
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        self.db.add(tag)
        self.db.flush()
        return tag.id

    def get_tag_id_by_title(self, title: str, user_id: str) -> str:
        tag = self._live(user_id).filter(func.lower(TagModel.title) == normalize_tag(title)).first()
        if tag is None:
            raise TagNotFound()
        return tag.id

    def _tag_ids(self, titles: list[str], user_id: str) -> dict[str, str]:
        """Map lower-cased title -> tag id for the titles that exist"""
        titles = normalize_tags(titles)
        if not titles:
            return {}
        rows = self._live(user_id).filter(func.lower(TagModel.title).in_(titles)).all()
        return {row.title.lower(): row.id for row in rows}

    def link_tags_to_task(self, task_id: str, user_id: str, titles: list[str]) -> None:
        """
        Link tags (by title) to a task, in the given order

        Raises:
            TagNotFound: a title has no live tag for this user
        """
        titles = normalize_tags(titles)
        ids = self._tag_ids(titles, user_id)
        linked = {
            row.tag_id
            for row in self.db.query(TaskTagModel.tag_id).filter(TaskTagModel.task_id == task_id).all()
        }
        for title in titles:
            tag_id = ids.get(title)
            if tag_id is None:
                raise TagNotFound()
            if tag_id in linked:
                continue
            self.db.add(TaskTagModel(task_id=task_id, tag_id=tag_id))
            linked.add(tag_id)
        self.db.flush()

    def unlink_tags_from_task(self, task_id: str, user_id: str, titles: list[str]) -> None:
        ids = list(self._tag_ids(titles, user_id).values())
        if not ids:
            return
        self.db.query(TaskTagModel).filter(
            TaskTagModel.task_id == task_id,
            TaskTagModel.tag_id.in_(ids),
        ).delete(synchronize_session=False)

    def get_tags_by_user_id(self, user_id: str) -> list[TagModel]:
        tags = self._live(user_id).order_by(TagModel.id).all()
        if not tags:
            raise NoTagsFound()
        return tags

    def get_tags_by_task_id(self, task_id: str, user_id: str) -> list[str]:
        """Titles linked to the task, in link order (may be empty)"""
        rows = (
            self.db.query(TagModel.title)
            .join(TaskTagModel, TaskTagModel.tag_id == TagModel.id)
            .filter(
                TaskTagModel.task_id == task_id,
                TagModel.user_id == user_id,
                TagModel.deleted_at.is_(None),
            )
            .order_by(TaskTagModel.id)
            .all()
        )
        return [row.title for row in rows]

    def get_tags_by_task_ids(self, task_ids: list[str], user_id: str) -> dict[str, list[str]]:
        """Batch variant used by the task views: task_id -> titles in link order"""
        result: dict[str, list[str]] = {}
        if not task_ids:
            return result
        rows = (
            self.db.query(TaskTagModel.task_id, TagModel.title)
            .join(TagModel, TagModel.id == TaskTagModel.tag_id)
            .filter(
                TaskTagModel.task_id.in_(task_ids),
                TagModel.user_id == user_id,
                TagModel.deleted_at.is_(None),
            )
            .order_by(TaskTagModel.id)
            .all()
        )
        for task_id, title in rows:
            result.setdefault(task_id, []).append(title)
        return result
