import base64
import json
from http import HTTPStatus
from typing import Any, cast

import pytest

from imagehost.core.models.errors import (
    ForbiddenError,
    MetadataOperationFailedError,
    NotFoundError,
    QuotaExceededError,
    UnauthorizedError,
    ValidationError,
)
from imagehost.core.utils.response import ResponseBuilder


def parse_body(resp: dict[str, Any]) -> dict[str, Any]:
    return cast(dict[str, Any], json.loads(resp["body"]))


def test_ok_response() -> None:
    resp = ResponseBuilder.ok({"foo": "bar"}, request_id="req-1")
    parsed = parse_body(resp)

    assert resp["statusCode"] == HTTPStatus.OK
    assert parsed == {"foo": "bar", "request_id": "req-1"}
    assert resp["headers"]["Access-Control-Allow-Origin"] == "*"


@pytest.mark.parametrize(
    "exc,status,error",
    [
        (NotFoundError(message="Image not found"), HTTPStatus.NOT_FOUND, "NOT_FOUND"),
        (UnauthorizedError(), HTTPStatus.UNAUTHORIZED, "UNAUTHORIZED"),
        (ForbiddenError(message="no"), HTTPStatus.FORBIDDEN, "FORBIDDEN"),
        (
            QuotaExceededError(used=900, quota=1000, attempted=101),
            HTTPStatus.FORBIDDEN,
            "QUOTA_EXCEEDED",
        ),
        (ValidationError(message="bad"), HTTPStatus.UNPROCESSABLE_ENTITY, "VALIDATION_FAILED"),
        (
            MetadataOperationFailedError(message="db down"),
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "INTERNAL_SERVER_ERROR",
        ),
    ],
)
def test_service_error_mapping(exc, status, error) -> None:
    resp = ResponseBuilder.service_error(exc)

    assert resp["statusCode"] == status
    assert parse_body(resp)["error"] == error


def test_quota_response_carries_numbers() -> None:
    resp = ResponseBuilder.service_error(QuotaExceededError(used=900, quota=1000, attempted=101))

    assert parse_body(resp)["details"] == {
        "used": 900,
        "quota": 1000,
        "remaining": 100,
        "attempted": 101,
    }


def test_not_found_response_has_no_details() -> None:
    resp = ResponseBuilder.service_error(NotFoundError(message="Image not found", details={"x": 1}))

    assert "details" not in parse_body(resp)


def test_binary_response() -> None:
    resp = ResponseBuilder.binary_response(
        b"\x89PNG",
        content_type="image/png",
        headers={"X-Image-UUID": "abc"},
    )

    assert resp["isBase64Encoded"] is True
    assert base64.b64decode(resp["body"]) == b"\x89PNG"
    assert resp["headers"]["Content-Type"] == "image/png"
    assert resp["headers"]["Content-Length"] == "4"
    assert resp["headers"]["X-Image-UUID"] == "abc"
    assert resp["headers"]["Access-Control-Allow-Origin"] == "*"


def test_redirect_response() -> None:
    resp = ResponseBuilder.redirect("https://img.example.com/i/abc", headers={"Cache-Control": "no-store"})

    assert resp["statusCode"] == HTTPStatus.FOUND
    assert resp["headers"]["Location"] == "https://img.example.com/i/abc"
    assert resp["headers"]["Cache-Control"] == "no-store"
    assert resp["body"] == ""
