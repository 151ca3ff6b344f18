"""Status read service"""
from sqlalchemy.orm import Session

from taskboard.infrastructure.db.models import StatusModel
from taskboard.infrastructure.repositories.statuses import StatusRepository


class StatusReadService:
    def __init__(self, db: Session):
        self.db = db
        self.statuses = StatusRepository(db)

    def get_statuses(self) -> list[StatusModel]:
        return self.statuses.get_statuses()

    def get_status_by_id(self, status_id: int) -> StatusModel:
        return self.statuses.get_status_by_id(status_id)
