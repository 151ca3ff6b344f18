"""
Error -> HTTP status mapping and FastAPI exception handlers
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError

from taskboard import errors
from taskboard.api.responses import error_response, success_response, validation_error_response

logger = logging.getLogger(__name__)


# Looked up along the exception's MRO, so subclasses inherit their parent's status
STATUS_CODES: dict[type[errors.LocalError], int] = {
    # 400
    errors.EmptyRequestBody: 400,
    errors.InvalidJSON: 400,
    errors.EmptyData: 400,
    errors.InvalidData: 400,
    errors.FailedToParseQueryParams: 400,
    errors.EmptyQueryListID: 400,
    errors.EmptyQueryHeadingID: 400,
    errors.EmptyQueryTaskID: 400,
    errors.CannotDeleteDefaultList: 400,
    errors.CannotMoveDefaultHeading: 400,
    errors.CannotDeleteDefaultHeading: 400,
    errors.InvalidTaskTimeRange: 400,
    errors.NoChangesDetected: 400,
    # 401
    errors.UserUnauthenticated: 401,
    errors.InvalidCredentials: 401,
    errors.SessionNotFound: 401,
    errors.RefreshTokenExpired: 401,
    errors.UserDeviceNotFound: 401,
    # 404
    errors.UserNotFound: 404,
    errors.ListNotFound: 404,
    errors.HeadingNotFound: 404,
    errors.TaskNotFound: 404,
    errors.TagNotFound: 404,
    errors.StatusNotFound: 404,
    errors.NothingFound: 404,
    # 409
    errors.UserAlreadyExists: 409,
    errors.EmailAlreadyTaken: 409,
    # 500
    errors.TaskStatusNotFound: 500,
    errors.FailedToCreateTask: 500,
    errors.StoreUnavailable: 500,
}


def status_code_for(exc: errors.LocalError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


async def local_error_handler(request: Request, exc: errors.LocalError):
    # empty listings are not failures
    if isinstance(exc, errors.NothingFound):
        return success_response(exc.message, [])

    code = status_code_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.debug("%s %s -> %d %s", request.method, request.url.path, code, exc.message)
    return error_response(code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        loc = tuple(err.get("loc", ()))
        if err.get("type") == "json_invalid":
            return error_response(400, errors.InvalidJSON.message)
        if err.get("type") == "missing" and loc == ("body",):
            return error_response(400, errors.EmptyRequestBody.message)
        field = ".".join(str(part) for part in loc[1:]) or ".".join(str(part) for part in loc)
        messages.append(f"{field}: {err.get('msg')}")
    return validation_error_response(messages)


async def store_error_handler(request: Request, exc: DBAPIError):
    logger.error("%s %s: store error: %s", request.method, request.url.path, exc.orig)
    return error_response(500, errors.StoreUnavailable.message)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(errors.LocalError, local_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    # constraint violations are translated by the use cases; only a lost store is 500 here
    app.add_exception_handler(OperationalError, store_error_handler)
    app.add_exception_handler(InterfaceError, store_error_handler)
