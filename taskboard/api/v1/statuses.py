"""
Status API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taskboard.api.deps import get_current_user_id, get_db
from taskboard.api.responses import success_response
from taskboard.api.schemas import StatusResponse
from taskboard.application.statuses import StatusReadService
from taskboard.errors import InvalidData


router = APIRouter(prefix="/statuses", tags=["statuses"])


@router.get("")
def get_statuses(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    statuses = StatusReadService(db).get_statuses()
    return success_response("statuses received", [StatusResponse.model_validate(s) for s in statuses])


@router.get("/{status_id}")
def get_status(status_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    try:
        parsed_id = int(status_id)
    except ValueError:
        raise InvalidData("status_id must be an integer")
    status = StatusReadService(db).get_status_by_id(parsed_id)
    return success_response("status received", StatusResponse.model_validate(status))
