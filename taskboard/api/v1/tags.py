"""
Tag API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taskboard.api.deps import get_current_user_id, get_db
from taskboard.api.responses import success_response
from taskboard.api.schemas import TagResponse
from taskboard.application.tags import TagReadService


router = APIRouter(prefix="/user/tags", tags=["tags"])


@router.get("")
def get_tags(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    tags = TagReadService(db).get_tags_by_user_id(user_id)
    return success_response("tags received", [TagResponse.model_validate(t) for t in tags])
