"""
Heading storage
"""
from sqlalchemy.orm import Session

from taskboard.domain import clock
from taskboard.errors import DefaultHeadingNotFound, HeadingNotFound, NoHeadingsFound
from taskboard.infrastructure.db.models import HeadingModel, TaskModel


class HeadingRepository:
    def __init__(self, db: Session):
        self.db = db

    def _live(self, user_id: str):
        return self.db.query(HeadingModel).filter(
            HeadingModel.user_id == user_id,
            HeadingModel.deleted_at.is_(None),
        )

    def create_heading(self, heading: HeadingModel) -> None:
        self.db.add(heading)
        self.db.flush()

    def get_heading_by_id(self, heading_id: str, user_id: str, for_update: bool = False) -> HeadingModel:
        query = self._live(user_id).filter(HeadingModel.id == heading_id)
        if for_update:
            query = query.with_for_update()
        heading = query.first()
        if heading is None:
            raise HeadingNotFound()
        return heading

    def get_headings_by_list_id(self, list_id: str, user_id: str) -> list[HeadingModel]:
        headings = self._live(user_id).filter(HeadingModel.list_id == list_id).order_by(HeadingModel.id).all()
        if not headings:
            raise NoHeadingsFound()
        return headings

    def get_default_heading_id(self, list_id: str, user_id: str) -> str:
        heading = self._live(user_id).filter(
            HeadingModel.list_id == list_id,
            HeadingModel.is_default.is_(True),
        ).first()
        if heading is None:
            raise DefaultHeadingNotFound()
        return heading.id

    def update_heading(self, heading_id: str, user_id: str, title: str) -> None:
        count = self._live(user_id).filter(HeadingModel.id == heading_id).update(
            {HeadingModel.title: title, HeadingModel.updated_at: clock.utc_now()}
        )
        if count == 0:
            raise HeadingNotFound()

    def move_heading_to_another_list(self, heading_id: str, user_id: str, list_id: str) -> int:
        """
        Re-parent a heading and every live task under it

        Returns:
            Number of tasks moved (zero is fine)
        """
        now = clock.utc_now()
        count = self._live(user_id).filter(HeadingModel.id == heading_id).update(
            {HeadingModel.list_id: list_id, HeadingModel.updated_at: now}
        )
        if count == 0:
            raise HeadingNotFound()

        return self.db.query(TaskModel).filter(
            TaskModel.heading_id == heading_id,
            TaskModel.user_id == user_id,
            TaskModel.deleted_at.is_(None),
        ).update({TaskModel.list_id: list_id, TaskModel.updated_at: now})

    def delete_heading(self, heading_id: str, user_id: str) -> None:
        count = self._live(user_id).filter(HeadingModel.id == heading_id).update(
            {HeadingModel.deleted_at: clock.utc_now()}
        )
        if count == 0:
            raise HeadingNotFound()

    def delete_headings_by_list_id(self, list_id: str, user_id: str) -> list[str]:
        """
        Soft-delete every live heading of a list

        Returns:
            Ids of the deleted headings
        """
        query = self._live(user_id).filter(HeadingModel.list_id == list_id)
        heading_ids = [h.id for h in query.order_by(HeadingModel.id).all()]
        if heading_ids:
            self._live(user_id).filter(HeadingModel.id.in_(heading_ids)).update(
                {HeadingModel.deleted_at: clock.utc_now()}
            )
        return heading_ids
