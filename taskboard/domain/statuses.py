"""Closed set of task statuses"""
from enum import Enum


class TaskStatus(str, Enum):
    NOT_STARTED = "Not started"
    PLANNED = "Planned"
    COMPLETED = "Completed"
    ARCHIVED = "Archived"


# Seeded ids, in table order
STATUS_IDS = {
    TaskStatus.NOT_STARTED: 1,
    TaskStatus.PLANNED: 2,
    TaskStatus.COMPLETED: 3,
    TaskStatus.ARCHIVED: 4,
}

# Statuses that never count as overdue
CLOSED_STATUSES = (TaskStatus.COMPLETED, TaskStatus.ARCHIVED)
