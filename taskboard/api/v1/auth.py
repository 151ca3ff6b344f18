"""
Auth API endpoints: register, login, refresh, logout
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from taskboard.api.deps import (
    REFRESH_TOKEN_COOKIE, get_app_settings, get_current_user_id, get_db, get_device, get_refresh_token,
)
from taskboard.api.responses import success_response
from taskboard.api.schemas import CredentialsRequest, TokenResponse
from taskboard.application.auth import (
    DeviceInfo, LoginUseCase, LogoutUseCase, RefreshTokensUseCase, RegisterUseCase, TokenData,
)
from taskboard.config import Settings
from taskboard.errors import SessionNotFound


router = APIRouter(tags=["auth"])


def _with_refresh_cookie(response: JSONResponse, token_data: TokenData, settings: Settings) -> JSONResponse:
    response.set_cookie(
        key=REFRESH_TOKEN_COOKIE,
        value=token_data.refresh_token,
        max_age=settings.JWT_REFRESH_TTL,
        domain=settings.JWT_REFRESH_COOKIE_DOMAIN,
        path=settings.JWT_REFRESH_COOKIE_PATH,
        httponly=True,
    )
    return response


# === Endpoints ===

@router.post("/register")
def register(
    req: CredentialsRequest,
    db: Session = Depends(get_db),
    device: DeviceInfo = Depends(get_device),
    settings: Settings = Depends(get_app_settings),
):
    """Register a user; answers with a token pair"""
    token_data = RegisterUseCase(db, settings).execute(req.email, req.password, device)
    response = success_response("user created", TokenResponse.model_validate(token_data), code=201)
    return _with_refresh_cookie(response, token_data, settings)


@router.post("/login")
def login(
    req: CredentialsRequest,
    db: Session = Depends(get_db),
    device: DeviceInfo = Depends(get_device),
    settings: Settings = Depends(get_app_settings),
):
    token_data = LoginUseCase(db, settings).execute(req.email, req.password, device)
    response = success_response("user logged in", TokenResponse.model_validate(token_data))
    return _with_refresh_cookie(response, token_data, settings)


@router.post("/refresh-tokens")
def refresh_tokens(
    refresh_token: str | None = Depends(get_refresh_token),
    db: Session = Depends(get_db),
    device: DeviceInfo = Depends(get_device),
    settings: Settings = Depends(get_app_settings),
):
    if not refresh_token:
        raise SessionNotFound()
    token_data = RefreshTokensUseCase(db, settings).execute(refresh_token, device)
    response = success_response("tokens refreshed", TokenResponse.model_validate(token_data))
    return _with_refresh_cookie(response, token_data, settings)


@router.post("/logout")
def logout(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    device: DeviceInfo = Depends(get_device),
    settings: Settings = Depends(get_app_settings),
):
    LogoutUseCase(db, settings).execute(user_id, device)
    response = success_response("user logged out")
    response.delete_cookie(
        REFRESH_TOKEN_COOKIE,
        domain=settings.JWT_REFRESH_COOKIE_DOMAIN,
        path=settings.JWT_REFRESH_COOKIE_PATH,
    )
    return response
