"""
Tests for identity use-cases: register, login, refresh, logout, profile
"""
from datetime import timedelta

import pytest

from taskboard.application.auth import (
    DeleteUserUseCase, DeviceInfo, LoginUseCase, LogoutUseCase, RefreshTokensUseCase, RegisterUseCase,
    UpdateUserUseCase, UserReadService,
)
from taskboard.application.lists import ListReadService
from taskboard.auth import TokenService
from taskboard.domain import clock
from taskboard.errors import (
    EmailAlreadyTaken, InvalidCredentials, InvalidData, NoChangesDetected, RefreshTokenExpired,
    SessionNotFound, UserAlreadyExists, UserDeviceNotFound, UserNotFound, UserUnauthenticated,
)
from taskboard.infrastructure.db.models import SessionModel
from taskboard.infrastructure.repositories.users import UserRepository

DEVICE = DeviceInfo(user_agent="pytest", ip="127.0.0.1")


class TestRegister:
    def test_register_issues_tokens_and_inbox(self, db_session, settings):
        tokens = RegisterUseCase(db_session, settings).execute("Ann@Example.com", "secret123", DEVICE)

        assert TokenService(settings).get_user_id(tokens.access_token) == tokens.user_id
        assert tokens.refresh_token
        assert UserReadService(db_session).get_user_by_id(tokens.user_id).email == "ann@example.com"
        assert ListReadService(db_session).get_default_list(tokens.user_id).title == "Inbox"

    def test_duplicate_email(self, db_session, settings):
        RegisterUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)
        with pytest.raises(UserAlreadyExists):
            RegisterUseCase(db_session, settings).execute("ANN@example.com", "another1", DEVICE)

    def test_short_password(self, db_session, settings):
        with pytest.raises(InvalidData):
            RegisterUseCase(db_session, settings).execute("ann@example.com", "123", DEVICE)

    def test_bad_email(self, db_session, settings):
        with pytest.raises(InvalidData):
            RegisterUseCase(db_session, settings).execute("not-an-email", "secret123", DEVICE)

    def test_deleted_user_can_register_again(self, db_session, settings):
        first = RegisterUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)
        DeleteUserUseCase(db_session, settings).execute(first.user_id)

        again = RegisterUseCase(db_session, settings).execute("ann@example.com", "newsecret", DEVICE)
        assert again.user_id == first.user_id
        assert ListReadService(db_session).get_default_list(again.user_id).title == "Inbox"


class TestLogin:
    def test_login(self, db_session, settings):
        RegisterUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)
        tokens = LoginUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)
        assert tokens.access_token

    def test_wrong_password(self, db_session, settings):
        RegisterUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)
        with pytest.raises(InvalidCredentials):
            LoginUseCase(db_session, settings).execute("ann@example.com", "wrong-pass", DEVICE)

    def test_unknown_user(self, db_session, settings):
        with pytest.raises(InvalidCredentials):
            LoginUseCase(db_session, settings).execute("ghost@example.com", "secret123", DEVICE)

    def test_same_device_keeps_one_session(self, db_session, settings):
        first = RegisterUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)
        LoginUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)
        count = db_session.query(SessionModel).filter(SessionModel.user_id == first.user_id).count()
        assert count == 1

    def test_oldest_sessions_are_evicted(self, db_session, settings):
        settings.MAX_SESSIONS_PER_USER = 2
        first = RegisterUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)
        for agent in ("phone", "tablet", "laptop"):
            LoginUseCase(db_session, settings).execute(
                "ann@example.com", "secret123", DeviceInfo(user_agent=agent, ip="10.0.0.1"),
            )
        count = db_session.query(SessionModel).filter(SessionModel.user_id == first.user_id).count()
        assert count == 2


class TestRefresh:
    def test_refresh_rotates_token(self, db_session, settings):
        tokens = RegisterUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)
        fresh = RefreshTokensUseCase(db_session, settings).execute(tokens.refresh_token, DEVICE)

        assert fresh.refresh_token != tokens.refresh_token
        with pytest.raises(SessionNotFound):
            RefreshTokensUseCase(db_session, settings).execute(tokens.refresh_token, DEVICE)

    def test_unknown_token(self, db_session, settings):
        with pytest.raises(SessionNotFound):
            RefreshTokensUseCase(db_session, settings).execute("nope", DEVICE)

    def test_other_device(self, db_session, settings):
        tokens = RegisterUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)
        with pytest.raises(UserDeviceNotFound):
            RefreshTokensUseCase(db_session, settings).execute(
                tokens.refresh_token, DeviceInfo(user_agent="curl", ip="127.0.0.1"),
            )

    def test_expired_session_is_removed(self, db_session, session_factory, settings, monkeypatch):
        tokens = RegisterUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)
        later = clock.utc_now() + timedelta(seconds=settings.JWT_REFRESH_TTL + 1)
        monkeypatch.setattr(clock, "utc_now", lambda: later)

        with pytest.raises(RefreshTokenExpired):
            RefreshTokensUseCase(db_session, settings).execute(tokens.refresh_token, DEVICE)

        # the delete is committed, not rolled back with the failed call
        with session_factory() as other:
            assert other.query(SessionModel).filter_by(refresh_token=tokens.refresh_token).first() is None
        with pytest.raises(SessionNotFound):
            RefreshTokensUseCase(db_session, settings).execute(tokens.refresh_token, DEVICE)


class TestLogoutAndProfile:
    def test_logout_drops_device_sessions(self, db_session, settings):
        tokens = RegisterUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)
        LogoutUseCase(db_session, settings).execute(tokens.user_id, DEVICE)
        with pytest.raises(SessionNotFound):
            RefreshTokensUseCase(db_session, settings).execute(tokens.refresh_token, DEVICE)

    def test_update_email(self, db_session, settings):
        tokens = RegisterUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)
        user = UpdateUserUseCase(db_session, settings).execute(tokens.user_id, email="anna@example.com")
        assert user.email == "anna@example.com"
        LoginUseCase(db_session, settings).execute("anna@example.com", "secret123", DEVICE)

    def test_update_to_taken_email(self, db_session, settings):
        RegisterUseCase(db_session, settings).execute("bob@example.com", "secret123", DEVICE)
        tokens = RegisterUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)
        with pytest.raises(EmailAlreadyTaken):
            UpdateUserUseCase(db_session, settings).execute(tokens.user_id, email="Bob@example.com")

    def test_update_to_email_taken_concurrently(self, db_session, settings, monkeypatch):
        RegisterUseCase(db_session, settings).execute("bob@example.com", "secret123", DEVICE)
        tokens = RegisterUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)
        # the other registration commits after the availability check
        monkeypatch.setattr(UserRepository, "email_taken", lambda self, email, except_user_id: False)

        with pytest.raises(EmailAlreadyTaken):
            UpdateUserUseCase(db_session, settings).execute(tokens.user_id, email="bob@example.com")
        assert UserReadService(db_session).get_user_by_id(tokens.user_id).email == "ann@example.com"

    def test_update_without_changes(self, db_session, settings):
        tokens = RegisterUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)
        with pytest.raises(NoChangesDetected):
            UpdateUserUseCase(db_session, settings).execute(
                tokens.user_id, email="ann@example.com", password="secret123",
            )

    def test_delete_user(self, db_session, settings):
        tokens = RegisterUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)
        DeleteUserUseCase(db_session, settings).execute(tokens.user_id)
        with pytest.raises(UserNotFound):
            UserReadService(db_session).get_user_by_id(tokens.user_id)
        with pytest.raises(InvalidCredentials):
            LoginUseCase(db_session, settings).execute("ann@example.com", "secret123", DEVICE)


class TestTokenService:
    def test_tampered_token(self, settings):
        token = TokenService(settings).new_access_token("user-1")
        with pytest.raises(UserUnauthenticated):
            TokenService(settings).get_user_id(token + "x")

    def test_expired_token(self, settings, monkeypatch):
        past = clock.utc_now() - timedelta(hours=1)
        monkeypatch.setattr(clock, "utc_now", lambda: past)
        token = TokenService(settings).new_access_token("user-1")
        monkeypatch.undo()
        with pytest.raises(UserUnauthenticated):
            TokenService(settings).get_user_id(token)
