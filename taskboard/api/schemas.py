"""
Request/response models shared by the v1 routers

Dates are YYYY-MM-DD; datetimes are "YYYY-MM-DD HH:MM:SS" in UTC.
"""
from datetime import date, datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator

from taskboard.domain import clock
from taskboard.domain.list import MAX_TITLE_LENGTH
from taskboard.domain.task import TaskGroup

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_datetime(value: datetime | None) -> str | None:
    if value is None:
        return None
    return clock.as_utc(value).strftime(DATETIME_FORMAT)


def parse_datetime(value: Any) -> Any:
    """Accept "YYYY-MM-DD HH:MM:SS" (UTC) next to ISO 8601"""
    if isinstance(value, str) and value.strip():
        raw = value.strip()
        try:
            return datetime.strptime(raw, DATETIME_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            pass
        try:
            return clock.as_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
        except ValueError:
            raise ValueError(f"datetime must be in {DATETIME_FORMAT} format")
    if isinstance(value, datetime):
        return clock.as_utc(value)
    return value


def _title(v: str | None) -> str:
    if v is None:
        raise ValueError("title must not be null")
    v = v.strip()
    if not v:
        raise ValueError("title must not be empty")
    if len(v) > MAX_TITLE_LENGTH:
        raise ValueError(f"title must be at most {MAX_TITLE_LENGTH} characters")
    return v


# === Requests ===

class CredentialsRequest(BaseModel):
    email: str
    password: str


class UserUpdateRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class TitleRequest(BaseModel):
    title: str

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _title(v)


class TaskCreateRequest(BaseModel):
    title: str
    description: str | None = None
    start_date: date | None = None
    deadline: date | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    tags: list[str] | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _title(v)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def validate_times(cls, v: Any) -> Any:
        return parse_datetime(v)


class TaskUpdateRequest(BaseModel):
    """Absent field = no change; null clears description/start_date/deadline"""
    title: str | None = None
    description: str | None = None
    start_date: date | None = None
    deadline: date | None = None
    list_id: str | None = None
    heading_id: str | None = None
    tags: list[str] | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str:
        return _title(v)


class TaskTimeRequest(BaseModel):
    start_time: datetime | None = None
    end_time: datetime | None = None

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def validate_times(cls, v: Any) -> Any:
        return parse_datetime(v)


# === Responses ===

class TokenResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    access_token: str
    refresh_token: str
    expires_at: datetime
    user_id: str

    @field_serializer("expires_at")
    def serialize_expires_at(self, value: datetime) -> str | None:
        return format_datetime(value)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    updated_at: datetime | None = None

    @field_serializer("updated_at")
    def serialize_updated_at(self, value: datetime | None) -> str | None:
        return format_datetime(value)


class ListResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    user_id: str
    is_default: bool
    updated_at: datetime | None = None

    @field_serializer("updated_at")
    def serialize_updated_at(self, value: datetime | None) -> str | None:
        return format_datetime(value)


class HeadingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    list_id: str
    user_id: str
    is_default: bool
    updated_at: datetime | None = None

    @field_serializer("updated_at")
    def serialize_updated_at(self, value: datetime | None) -> str | None:
        return format_datetime(value)


class TagResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str


class StatusResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str | None = None
    start_date: date | None = None
    deadline: date | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    status_id: int
    status: str
    list_id: str
    heading_id: str
    user_id: str
    tags: list[str] = []
    overdue: bool = False
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    @field_serializer("start_time", "end_time", "updated_at", "deleted_at")
    def serialize_datetimes(self, value: datetime | None) -> str | None:
        return format_datetime(value)


def task_group_data(group: TaskGroup) -> dict[str, Any]:
    """Group keys that are set, plus its tasks"""
    data: dict[str, Any] = {}
    if group.list_id is not None:
        data["list_id"] = group.list_id
    if group.heading_id is not None:
        data["heading_id"] = group.heading_id
    if group.title is not None:
        data["title"] = group.title
    if group.is_default is not None:
        data["is_default"] = group.is_default
    if group.start_date is not None:
        data["start_date"] = group.start_date.isoformat()
    if group.month is not None:
        data["month"] = group.month.strftime("%Y-%m")
    data["tasks"] = [TaskResponse.model_validate(t).model_dump(mode="json") for t in group.tasks]
    return data
