"""
FastAPI dependencies (DB session, authentication, pagination)
"""
from fastapi import Depends, Query, Request
from sqlalchemy.orm import Session

from taskboard.application.auth import DeviceInfo, UserReadService
from taskboard.config import Settings
from taskboard.domain.pagination import Pagination, parse_pagination
from taskboard.errors import UserNotFound, UserUnauthenticated
from taskboard.infrastructure.db.session import get_db as _get_db


# Re-export get_db so routers and test overrides share one key
get_db = _get_db

ACCESS_TOKEN_COOKIE = "jwt"
ACCESS_TOKEN_QUERY = "jwt"
REFRESH_TOKEN_COOKIE = "refreshToken"
REFRESH_TOKEN_HEADER = "refreshToken"


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _access_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return request.query_params.get(ACCESS_TOKEN_QUERY) or request.cookies.get(ACCESS_TOKEN_COOKIE)


def get_current_user_id(request: Request, db: Session = Depends(get_db)) -> str:
    """
    Authenticated user id from the access token

    The token is read from `Authorization: Bearer`, `?jwt=` or the `jwt` cookie.
    Tokens of deleted users stop working at once.

    Raises:
        UserUnauthenticated: no token, the token does not validate, or its user is gone

    Usage:
        @router.get("/user/lists")
        def get_lists(user_id: str = Depends(get_current_user_id)):
            ...
    """
    token = _access_token(request)
    if not token:
        raise UserUnauthenticated()
    user_id = request.app.state.tokens.get_user_id(token)
    try:
        UserReadService(db).get_user_by_id(user_id)
    except UserNotFound:
        raise UserUnauthenticated()
    return user_id


def get_device(request: Request) -> DeviceInfo:
    return DeviceInfo(
        user_agent=request.headers.get("user-agent") or "unknown",
        ip=request.client.host if request.client else "unknown",
    )


def get_refresh_token(request: Request) -> str | None:
    return request.cookies.get(REFRESH_TOKEN_COOKIE) or request.headers.get(REFRESH_TOKEN_HEADER)


def get_pagination(
    limit: str | None = Query(None),
    after_id: str | None = Query(None),
    after_date: str | None = Query(None),
) -> Pagination:
    return parse_pagination(limit, after_id, after_date)
