"""
Unit tests for the service error to HTTP response mapping.
"""
import asyncio
import json

import pytest
from starlette.requests import Request

from app.core.errors import (
    ConflictError,
    InsufficientBalanceError,
    NotFoundError,
    PersistenceError,
    ValidationError,
    core_error_handler,
)


def _request():
    return Request({"type": "http", "method": "POST", "path": "/api/test", "headers": [], "query_string": b""})


@pytest.mark.parametrize(
    "error, status_code, code",
    [
        (ValidationError("bad amount"), 422, "VALIDATION_ERROR"),
        (NotFoundError("no user"), 404, "NOT_FOUND"),
        (InsufficientBalanceError("too poor"), 409, "INSUFFICIENT_BALANCE"),
        (ConflictError("taken"), 409, "CONFLICT"),
        (PersistenceError("db down"), 503, "PERSISTENCE_ERROR"),
    ],
)
def test_error_response(error, status_code, code):
    response = asyncio.run(core_error_handler(_request(), error))

    assert response.status_code == status_code
    assert json.loads(response.body) == {"error": {"code": code, "message": error.message}}


def test_error_message_defaults_to_class_name():
    assert ValidationError().message == "ValidationError"
