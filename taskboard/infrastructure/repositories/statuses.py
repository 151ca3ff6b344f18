"""
Status storage: the closed status table
"""
from sqlalchemy.orm import Session

from taskboard.domain.statuses import STATUS_IDS, TaskStatus
from taskboard.errors import NoStatusesFound, StatusNotFound, TaskStatusNotFound
from taskboard.infrastructure.db.models import StatusModel


class StatusRepository:
    def __init__(self, db: Session):
        self.db = db
        self._ids: dict[str, int] = {}

    def get_statuses(self) -> list[StatusModel]:
        statuses = self.db.query(StatusModel).order_by(StatusModel.id).all()
        if not statuses:
            raise NoStatusesFound()
        return statuses

    def get_status_by_id(self, status_id: int) -> StatusModel:
        status = self.db.query(StatusModel).filter(StatusModel.id == status_id).first()
        if status is None:
            raise StatusNotFound()
        return status

    def get_status_id(self, status: TaskStatus) -> int:
        """Resolve a status name to its id (cached for the repository's lifetime)"""
        if status.value not in self._ids:
            row = self.db.query(StatusModel.id).filter(StatusModel.title == status.value).first()
            if row is None:
                raise TaskStatusNotFound()
            self._ids[status.value] = row[0]
        return self._ids[status.value]


def ensure_statuses(db: Session) -> None:
    """Seed the status table (idempotent) for databases built without Alembic"""
    existing = {s.title for s in db.query(StatusModel).all()}
    for status, status_id in STATUS_IDS.items():
        if status.value not in existing:
            db.add(StatusModel(id=status_id, title=status.value))
    db.commit()
