"""
JSON response envelope

  success:    {code, status_text, description, data}
  error:      {code, status_text, description}
  validation: {code, status_text, data: [messages]}
"""
from http import HTTPStatus
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def _status_text(code: int) -> str:
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""


def success_response(description: str, data: Any = None, code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=code,
        content={
            "code": code,
            "status_text": _status_text(code),
            "description": description,
            "data": jsonable_encoder(data),
        },
    )


def error_response(code: int, description: str) -> JSONResponse:
    return JSONResponse(
        status_code=code,
        content={
            "code": code,
            "status_text": _status_text(code),
            "description": description,
        },
    )


def validation_error_response(messages: list[str], code: int = 422) -> JSONResponse:
    return JSONResponse(
        status_code=code,
        content={
            "code": code,
            "status_text": _status_text(code),
            "data": messages,
        },
    )
