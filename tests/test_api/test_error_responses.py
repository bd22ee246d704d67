"""Tests for mapping service errors to HTTP responses."""

import pytest

from fastapi import HTTPException

from content_moderation_api.api.errors import ERROR_STATUS_CODES
from content_moderation_api.api.errors import unwrap_or_raise
from content_moderation_api.errors import ErrorKind
from content_moderation_api.errors import ModerationError
from content_moderation_api.errors import Result


def test_every_error_kind_has_a_status():
    assert set(ERROR_STATUS_CODES) == set(ErrorKind)
    assert ERROR_STATUS_CODES[ErrorKind.UNAUTHENTICATED] == 401


def test_unwrap_or_raise_returns_value():
    assert unwrap_or_raise(Result.ok("done")) == "done"


def test_unwrap_or_raise_structured_detail():
    with pytest.raises(HTTPException) as exc_info:
        unwrap_or_raise(Result.fail(ModerationError.not_found("Appeal not found")))

    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == {
        "kind": "not_found",
        "message": "Appeal not found",
    }
