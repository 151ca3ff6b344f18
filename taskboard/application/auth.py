"""
Identity use-cases: registration, login, refresh sessions, user profile.

Sessions:
  - one active device row per (user_id, user_agent), reused across logins
  - a session holds an opaque refresh token and its expiry
  - expired sessions are hard-deleted whenever a new session is opened
  - at most MAX_SESSIONS_PER_USER sessions per user; the oldest are evicted
"""
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskboard.auth import TokenService, hash_password, verify_password
from taskboard.config import Settings
from taskboard.domain import clock
from taskboard.domain.ids import new_id
from taskboard.errors import (
    EmailAlreadyTaken, InvalidCredentials, InvalidData, NoChangesDetected,
    RefreshTokenExpired, SessionNotFound, UserAlreadyExists, UserDeviceNotFound, UserNotFound,
)
from taskboard.infrastructure.db.models import SessionModel, UserDeviceModel, UserModel
from taskboard.infrastructure.db.session import transaction
from taskboard.infrastructure.repositories.users import UserRepository
from taskboard.application.lists import CreateDefaultListUseCase

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


@dataclass
class DeviceInfo:
    user_agent: str
    ip: str


@dataclass
class TokenData:
    access_token: str
    refresh_token: str
    expires_at: datetime
    user_id: str


def _normalize_email(email: str) -> str:
    email = (email or "").strip().lower()
    if not email or "@" not in email:
        raise InvalidData("email is invalid")
    return email


def _check_password(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidData(f"password must be at least {MIN_PASSWORD_LENGTH} characters")


class _AuthUseCase:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.users = UserRepository(db)
        self.tokens = TokenService(settings)

    def _open_session(self, user_id: str, device: DeviceInfo) -> TokenData:
        """Reuse or register the device, then issue a fresh token pair"""
        now = clock.utc_now()
        user_device = self.users.get_user_device(user_id, device.user_agent)
        if user_device is None:
            user_device = UserDeviceModel(
                id=new_id(),
                user_id=user_id,
                user_agent=device.user_agent,
                ip=device.ip,
                detached=False,
                latest_login_at=now,
            )
            self.users.add_device(user_device)
        else:
            user_device.latest_login_at = now
            user_device.ip = device.ip

        self.users.delete_expired_sessions(user_id, now)
        self.users.delete_device_sessions(user_id, user_device.id)
        self.users.evict_oldest_sessions(user_id, keep=self.settings.MAX_SESSIONS_PER_USER - 1)
        return self._issue(user_id, user_device.id, now)

    def _issue(self, user_id: str, device_id: str, now: datetime) -> TokenData:
        refresh_token = self.tokens.new_refresh_token()
        expires_at = now + self.tokens.refresh_ttl
        self.users.save_session(SessionModel(
            user_id=user_id,
            device_id=device_id,
            refresh_token=refresh_token,
            last_visit_at=now,
            expires_at=expires_at,
        ))
        return TokenData(
            access_token=self.tokens.new_access_token(user_id),
            refresh_token=refresh_token,
            expires_at=expires_at,
            user_id=user_id,
        )


# ── Use Cases ──

class RegisterUseCase(_AuthUseCase):
    def execute(self, email: str, password: str, device: DeviceInfo) -> TokenData:
        """
        Create (or revive a soft-deleted) user, its Inbox, and a session

        Raises:
            UserAlreadyExists: a live user has this email
        """
        email = _normalize_email(email)
        _check_password(password)
        password_hash = hash_password(password)
        now = clock.utc_now()

        try:
            with transaction(self.db):
                user = self.users.lock_user_by_email(email)
                if user is not None and user.deleted_at is None:
                    raise UserAlreadyExists()
                if user is not None:
                    user.deleted_at = None
                    user.password_hash = password_hash
                    user.updated_at = now
                    self.db.flush()
                    logger.info("user revived user_id=%s", user.id)
                else:
                    user = UserModel(id=new_id(), email=email, password_hash=password_hash,
                                     created_at=now, updated_at=now)
                    self.users.create_user(user)
                    logger.info("user registered user_id=%s", user.id)

                user_id = user.id
                CreateDefaultListUseCase(self.db).execute(user_id)
                token_data = self._open_session(user_id, device)
        except IntegrityError as exc:
            # lost the race against a concurrent registration of the same email
            raise UserAlreadyExists() from exc
        return token_data


class LoginUseCase(_AuthUseCase):
    def execute(self, email: str, password: str, device: DeviceInfo) -> TokenData:
        with transaction(self.db):
            try:
                user = self.users.get_user_by_email((email or "").strip())
            except UserNotFound:
                raise InvalidCredentials()
            if not verify_password(password or "", user.password_hash):
                raise InvalidCredentials()
            token_data = self._open_session(user.id, device)

        logger.info("user logged in user_id=%s", token_data.user_id)
        return token_data


class RefreshTokensUseCase(_AuthUseCase):
    def execute(self, refresh_token: str, device: DeviceInfo) -> TokenData:
        """
        Swap a refresh token for a new token pair

        Raises:
            SessionNotFound: unknown refresh token
            RefreshTokenExpired: session expired (and is removed)
            UserDeviceNotFound: no active device for this user agent
        """
        with transaction(self.db):
            session = self.users.get_session_by_refresh_token(refresh_token)
            if session is None:
                raise SessionNotFound()

            now = clock.utc_now()
            expired = clock.as_utc(session.expires_at) <= now
            if expired:
                # the expired session is removed even though the call fails
                self.users.delete_session(session)
            else:
                user_device = self.users.get_user_device(session.user_id, device.user_agent)
                if user_device is None:
                    raise UserDeviceNotFound()

                user_id = session.user_id
                self.users.delete_session(session)
                token_data = self._issue(user_id, user_device.id, now)

        if expired:
            raise RefreshTokenExpired()
        return token_data


class LogoutUseCase(_AuthUseCase):
    def execute(self, user_id: str, device: DeviceInfo) -> None:
        with transaction(self.db):
            user_device = self.users.get_user_device(user_id, device.user_agent)
            if user_device is None:
                raise UserDeviceNotFound()
            self.users.delete_device_sessions(user_id, user_device.id)

        logger.info("user logged out user_id=%s", user_id)


class UpdateUserUseCase(_AuthUseCase):
    def execute(self, user_id: str, email: str | None = None, password: str | None = None) -> UserModel:
        """
        Change email and/or password

        Raises:
            EmailAlreadyTaken: another live user has the email
            NoChangesDetected: nothing differs from the stored values
        """
        try:
            with transaction(self.db):
                user = self.users.get_user_by_id(user_id)
                changed = False

                if email is not None:
                    email = _normalize_email(email)
                    if email != user.email.lower():
                        if self.users.email_taken(email, user_id):
                            raise EmailAlreadyTaken()
                        user.email = email
                        changed = True

                if password is not None:
                    _check_password(password)
                    if not verify_password(password, user.password_hash):
                        user.password_hash = hash_password(password)
                        changed = True

                if not changed:
                    raise NoChangesDetected()
                user.updated_at = clock.utc_now()
                self.db.flush()
        except IntegrityError as exc:
            # another user took the email between the check and the flush
            raise EmailAlreadyTaken() from exc

        logger.info("user updated user_id=%s", user_id)
        return self.users.get_user_by_id(user_id)


class DeleteUserUseCase(_AuthUseCase):
    def execute(self, user_id: str) -> None:
        """Soft-delete the user and drop all of its sessions"""
        with transaction(self.db):
            self.users.delete_user(user_id)
            self.users.delete_user_sessions(user_id)

        logger.info("user deleted user_id=%s", user_id)


# ── Read Service ──

class UserReadService:
    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)

    def get_user_by_id(self, user_id: str) -> UserModel:
        return self.users.get_user_by_id(user_id)
