"""
List storage
"""
from sqlalchemy.orm import Session

from taskboard.domain import clock
from taskboard.errors import DefaultListNotFound, ListNotFound, NoListsFound
from taskboard.infrastructure.db.models import ListModel


class ListRepository:
    def __init__(self, db: Session):
        self.db = db

    def _live(self, user_id: str):
        return self.db.query(ListModel).filter(
            ListModel.user_id == user_id,
            ListModel.deleted_at.is_(None),
        )

    def create_list(self, list_: ListModel) -> None:
        self.db.add(list_)
        self.db.flush()

    def get_list_by_id(self, list_id: str, user_id: str, for_update: bool = False) -> ListModel:
        query = self._live(user_id).filter(ListModel.id == list_id)
        if for_update:
            query = query.with_for_update()
        list_ = query.first()
        if list_ is None:
            raise ListNotFound()
        return list_

    def get_lists_by_user_id(self, user_id: str) -> list[ListModel]:
        lists = self._live(user_id).order_by(ListModel.id).all()
        if not lists:
            raise NoListsFound()
        return lists

    def find_default_list(self, user_id: str) -> ListModel | None:
        return self._live(user_id).filter(ListModel.is_default.is_(True)).first()

    def get_default_list(self, user_id: str) -> ListModel:
        list_ = self.find_default_list(user_id)
        if list_ is None:
            raise DefaultListNotFound()
        return list_

    def get_default_list_id(self, user_id: str) -> str:
        return self.get_default_list(user_id).id

    def update_list(self, list_id: str, user_id: str, title: str) -> None:
        count = self._live(user_id).filter(ListModel.id == list_id).update(
            {ListModel.title: title, ListModel.updated_at: clock.utc_now()}
        )
        if count == 0:
            raise ListNotFound()

    def delete_list(self, list_id: str, user_id: str) -> None:
        count = self._live(user_id).filter(ListModel.id == list_id).update(
            {ListModel.deleted_at: clock.utc_now()}
        )
        if count == 0:
            raise ListNotFound()
