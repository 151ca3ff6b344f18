"""
User profile API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taskboard.api.deps import REFRESH_TOKEN_COOKIE, get_app_settings, get_current_user_id, get_db
from taskboard.api.responses import success_response
from taskboard.api.schemas import UserResponse, UserUpdateRequest
from taskboard.application.auth import DeleteUserUseCase, UpdateUserUseCase, UserReadService
from taskboard.config import Settings


router = APIRouter(prefix="/user", tags=["user"])


@router.get("")
def get_user(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    user = UserReadService(db).get_user_by_id(user_id)
    return success_response("user received", UserResponse.model_validate(user))


@router.patch("")
def update_user(
    req: UserUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    user = UpdateUserUseCase(db, settings).execute(user_id, email=req.email, password=req.password)
    return success_response("user updated", UserResponse.model_validate(user))


@router.delete("")
def delete_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    DeleteUserUseCase(db, settings).execute(user_id)
    response = success_response("user deleted")
    response.delete_cookie(
        REFRESH_TOKEN_COOKIE,
        domain=settings.JWT_REFRESH_COOKIE_DOMAIN,
        path=settings.JWT_REFRESH_COOKIE_PATH,
    )
    return response
