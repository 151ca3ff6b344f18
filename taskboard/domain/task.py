"""
Task domain rules and read views

Time range:
  both start_time and end_time set, start_time < end_time  -> Planned
  both empty                                                -> Not started
  anything else                                             -> InvalidTaskTimeRange

Overdue:
  deadline set, deadline <= today, status not Completed/Archived
"""
from dataclasses import dataclass, field
from datetime import date, datetime

from taskboard.domain.statuses import CLOSED_STATUSES, TaskStatus
from taskboard.errors import InvalidTaskTimeRange


def validate_time_range(start_time: datetime | None, end_time: datetime | None) -> None:
    """Raise InvalidTaskTimeRange unless both times are set (and ordered) or both are empty"""
    if start_time is None and end_time is None:
        return
    if start_time is None or end_time is None:
        raise InvalidTaskTimeRange()
    if start_time >= end_time:
        raise InvalidTaskTimeRange()


def status_for_time_range(start_time: datetime | None, end_time: datetime | None) -> TaskStatus:
    validate_time_range(start_time, end_time)
    if start_time is None:
        return TaskStatus.NOT_STARTED
    return TaskStatus.PLANNED


def is_overdue(deadline: date | None, status: str, today: date) -> bool:
    if deadline is None:
        return False
    if status in {s.value for s in CLOSED_STATUSES}:
        return False
    return deadline <= today


@dataclass
class TaskView:
    id: str
    title: str
    description: str | None
    start_date: date | None
    deadline: date | None
    start_time: datetime | None
    end_time: datetime | None
    status_id: int
    status: str
    list_id: str
    heading_id: str
    user_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None
    tags: list[str] = field(default_factory=list)
    overdue: bool = False


@dataclass
class TaskGroup:
    """One group of a grouped task view; exactly one key field is set"""
    tasks: list[TaskView] = field(default_factory=list)
    list_id: str | None = None
    heading_id: str | None = None
    title: str | None = None
    is_default: bool | None = None
    start_date: date | None = None
    month: date | None = None
