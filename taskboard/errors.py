"""
Local error taxonomy

Every error carries a stable, client-facing `message`. The HTTP layer maps
error classes to status codes (see taskboard.api.errors).
"""


class LocalError(Exception):
    message = "internal error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class NothingFound(LocalError):
    """Base for the empty-listing kinds (NoTasksFound, NoListsFound, ...)"""
    message = "nothing found"


# ── Auth ──

class UserNotFound(LocalError):
    message = "user not found"


class UserUnauthenticated(LocalError):
    message = "user is not authenticated"


class InvalidCredentials(LocalError):
    message = "invalid credentials"


class UserAlreadyExists(LocalError):
    message = "user with this email already exists"


class EmailAlreadyTaken(LocalError):
    message = "this email already taken"


class NoChangesDetected(LocalError):
    message = "no changes detected"


class UserDeviceNotFound(LocalError):
    message = "user device not found"


class SessionNotFound(LocalError):
    message = "session not found"


class RefreshTokenExpired(LocalError):
    message = "refresh token expired"


# ── Request ──

class EmptyRequestBody(LocalError):
    message = "request body is empty"


class InvalidJSON(LocalError):
    message = "failed to decode request body"


class EmptyData(LocalError):
    message = "data is empty"


class InvalidData(LocalError):
    message = "invalid data"


class FailedToParseQueryParams(LocalError):
    message = "failed to parse query params"


class InvalidCursor(FailedToParseQueryParams):
    message = "invalid format for cursor, expected object id type string or YYYY-MM-DD"


class EmptyQueryListID(LocalError):
    message = "list_id is empty in query"


class EmptyQueryHeadingID(LocalError):
    message = "heading_id is empty in query"


class EmptyQueryTaskID(LocalError):
    message = "task_id is empty in query"


# ── Lists ──

class ListNotFound(LocalError):
    message = "list not found"


class DefaultListNotFound(ListNotFound):
    message = "default list not found"


class NoListsFound(NothingFound):
    message = "no lists found"


class CannotDeleteDefaultList(LocalError):
    message = "cannot delete default list"


# ── Headings ──

class HeadingNotFound(LocalError):
    message = "heading not found"


class DefaultHeadingNotFound(HeadingNotFound):
    message = "default heading not found"


class NoHeadingsFound(NothingFound):
    message = "no headings found"


class CannotMoveDefaultHeading(LocalError):
    message = "cannot move default heading"


class CannotDeleteDefaultHeading(LocalError):
    message = "cannot delete default heading"


# ── Tasks ──

class TaskNotFound(LocalError):
    message = "task not found"


class NoTasksFound(NothingFound):
    message = "no tasks found"


class TaskStatusNotFound(LocalError):
    message = "task status_id not found"


class InvalidTaskTimeRange(LocalError):
    message = "invalid task time range"


class FailedToCreateTask(LocalError):
    message = "failed to create task"


# ── Tags ──

class TagNotFound(LocalError):
    message = "tag not found"


class NoTagsFound(NothingFound):
    message = "no tags found"


# ── Statuses ──

class StatusNotFound(LocalError):
    message = "task status not found"


class NoStatusesFound(NothingFound):
    message = "no statuses found"


# ── Store ──

class StoreUnavailable(LocalError):
    message = "storage is unavailable"
