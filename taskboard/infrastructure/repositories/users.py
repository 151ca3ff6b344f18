"""
Identity storage: users, devices, refresh sessions
"""
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from taskboard.domain import clock
from taskboard.errors import UserNotFound
from taskboard.infrastructure.db.models import SessionModel, UserDeviceModel, UserModel


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    # ── Users ──

    def _live(self):
        return self.db.query(UserModel).filter(UserModel.deleted_at.is_(None))

    def lock_user_by_email(self, email: str) -> UserModel | None:
        """
        Any row (live or soft-deleted) with this email, locked FOR UPDATE

        A live row wins over soft-deleted ones.
        """
        return (
            self.db.query(UserModel)
            .filter(func.lower(UserModel.email) == email.lower())
            .order_by(UserModel.deleted_at.is_not(None), UserModel.id)
            .with_for_update()
            .first()
        )

    def get_user_by_email(self, email: str) -> UserModel:
        user = self._live().filter(func.lower(UserModel.email) == email.lower()).first()
        if user is None:
            raise UserNotFound()
        return user

    def get_user_by_id(self, user_id: str) -> UserModel:
        user = self._live().filter(UserModel.id == user_id).first()
        if user is None:
            raise UserNotFound()
        return user

    def email_taken(self, email: str, except_user_id: str) -> bool:
        return self._live().filter(
            func.lower(UserModel.email) == email.lower(),
            UserModel.id != except_user_id,
        ).first() is not None

    def create_user(self, user: UserModel) -> None:
        self.db.add(user)
        self.db.flush()

    def delete_user(self, user_id: str) -> None:
        count = self._live().filter(UserModel.id == user_id).update(
            {UserModel.deleted_at: clock.utc_now()}
        )
        if count == 0:
            raise UserNotFound()

    # ── Devices ──

    def get_user_device(self, user_id: str, user_agent: str) -> UserDeviceModel | None:
        return self.db.query(UserDeviceModel).filter(
            UserDeviceModel.user_id == user_id,
            UserDeviceModel.user_agent == user_agent,
            UserDeviceModel.detached.is_(False),
        ).first()

    def add_device(self, device: UserDeviceModel) -> None:
        self.db.add(device)
        self.db.flush()

    # ── Sessions ──

    def save_session(self, session: SessionModel) -> None:
        self.db.add(session)
        self.db.flush()

    def get_session_by_refresh_token(self, refresh_token: str) -> SessionModel | None:
        return self.db.query(SessionModel).filter(SessionModel.refresh_token == refresh_token).first()

    def delete_session(self, session: SessionModel) -> None:
        self.db.delete(session)
        self.db.flush()

    def delete_device_sessions(self, user_id: str, device_id: str) -> int:
        return self.db.query(SessionModel).filter(
            SessionModel.user_id == user_id,
            SessionModel.device_id == device_id,
        ).delete(synchronize_session="fetch")

    def delete_user_sessions(self, user_id: str) -> int:
        return self.db.query(SessionModel).filter(
            SessionModel.user_id == user_id,
        ).delete(synchronize_session="fetch")

    def delete_expired_sessions(self, user_id: str, now: datetime) -> int:
        return self.db.query(SessionModel).filter(
            SessionModel.user_id == user_id,
            SessionModel.expires_at <= now,
        ).delete(synchronize_session="fetch")

    def evict_oldest_sessions(self, user_id: str, keep: int) -> int:
        """
        Hard-delete all but the `keep` most recent sessions of a user

        Returns:
            Number of evicted sessions
        """
        sessions = (
            self.db.query(SessionModel)
            .filter(SessionModel.user_id == user_id)
            .order_by(SessionModel.last_visit_at.desc(), SessionModel.id.desc())
            .all()
        )
        stale = sessions[max(keep, 0):]
        for session in stale:
            self.db.delete(session)
        self.db.flush()
        return len(stale)
