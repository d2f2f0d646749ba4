"""
Centralized API response builder for AWS Lambda / API Gateway.
"""

from __future__ import annotations

import base64
import json
from http import HTTPStatus
from typing import Any

from imagehost.core.models.errors import (
    ForbiddenError,
    ImageServiceError,
    NotFoundError,
    QuotaExceededError,
    UnauthorizedError,
    ValidationError,
)
from imagehost.core.utils.constants import (
    CORS_HEADERS,
    CORS_METHODS,
    CORS_ORIGIN,
    DEFAULT_CONTENT_TYPE,
    ERROR_CODE_VALIDATION_FAILED,
    EXPOSE_HEADERS,
)
from imagehost.core.utils.time import utc_now_iso

JsonDict = dict[str, Any]


class ResponseBuilder:
    """Factory for API Gateway-compatible HTTP responses."""

    DEFAULT_HEADERS: dict[str, str] = {
        "Content-Type": DEFAULT_CONTENT_TYPE,
    }

    DEFAULT_CORS_HEADERS: dict[str, str] = {
        "Access-Control-Allow-Origin": CORS_ORIGIN,
        "Access-Control-Allow-Headers": CORS_HEADERS,
        "Access-Control-Allow-Methods": CORS_METHODS,
        "Access-Control-Expose-Headers": EXPOSE_HEADERS,
    }

    @staticmethod
    def _build_headers() -> dict[str, str]:
        headers: dict[str, str] = dict(ResponseBuilder.DEFAULT_HEADERS)

        # Always include CORS headers
        headers.update(ResponseBuilder.DEFAULT_CORS_HEADERS)

        return headers

    @staticmethod
    def _response(
        *,
        status: HTTPStatus,
        body: JsonDict | None = None,
        request_id: str | None = None,
    ) -> JsonDict:
        payload: JsonDict = {}

        if body:
            payload.update(body)

        if request_id:
            payload["request_id"] = request_id

        response: JsonDict = {
            "statusCode": status.value,
            "headers": ResponseBuilder._build_headers(),
            "body": json.dumps(payload),
        }

        return response

    @staticmethod
    def ok(
        body: JsonDict,
        *,
        request_id: str | None = None,
    ) -> JsonDict:
        return ResponseBuilder._response(
            status=HTTPStatus.OK,
            body=body,
            request_id=request_id,
        )

    @staticmethod
    def error(
        *,
        status: HTTPStatus,
        message: str,
        error: str | None = None,
        details: JsonDict | list[Any] | None = None,
        request_id: str | None = None,
    ) -> JsonDict:
        payload: JsonDict = {
            "error": error or status.name,
            "message": message,
            "timestamp": utc_now_iso(),
        }

        if details:
            payload["details"] = details

        return ResponseBuilder._response(
            status=status,
            body=payload,
            request_id=request_id,
        )

    @staticmethod
    def bad_request(
        message: str,
        *,
        details: JsonDict | None = None,
        request_id: str | None = None,
    ) -> JsonDict:
        return ResponseBuilder.error(
            status=HTTPStatus.BAD_REQUEST,
            message=message,
            details=details,
            request_id=request_id,
        )

    @staticmethod
    def validation_error(
        *,
        message: str,
        error: str = ERROR_CODE_VALIDATION_FAILED,
        details: JsonDict | list[Any] | None = None,
        request_id: str | None = None,
    ) -> JsonDict:
        """422 Unprocessable Entity validation error."""
        return ResponseBuilder.error(
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            error=error,
            message=message,
            details=details,
            request_id=request_id,
        )

    @staticmethod
    def unauthorized(
        message: str = "Unauthorized",
        *,
        request_id: str | None = None,
    ) -> JsonDict:
        return ResponseBuilder.error(
            status=HTTPStatus.UNAUTHORIZED,
            message=message,
            request_id=request_id,
        )

    @staticmethod
    def forbidden(
        message: str = "Forbidden",
        *,
        error: str | None = None,
        details: JsonDict | None = None,
        request_id: str | None = None,
    ) -> JsonDict:
        return ResponseBuilder.error(
            status=HTTPStatus.FORBIDDEN,
            error=error,
            message=message,
            details=details,
            request_id=request_id,
        )

    @staticmethod
    def not_found(
        message: str = "Resource not found",
        *,
        request_id: str | None = None,
    ) -> JsonDict:
        return ResponseBuilder.error(
            status=HTTPStatus.NOT_FOUND,
            message=message,
            request_id=request_id,
        )

    @staticmethod
    def internal_error(
        message: str = "Internal server error",
        *,
        request_id: str | None = None,
    ) -> JsonDict:
        return ResponseBuilder.error(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            message=message,
            request_id=request_id,
        )

    @staticmethod
    def service_error(
        exc: ImageServiceError,
        *,
        request_id: str | None = None,
    ) -> JsonDict:
        """Map a domain error onto its HTTP response.

        Quota errors keep their numbers in ``details``; not-found responses
        carry no details so they look the same whatever the cause.
        """
        if isinstance(exc, NotFoundError):
            return ResponseBuilder.not_found(exc.message, request_id=request_id)

        if isinstance(exc, UnauthorizedError):
            return ResponseBuilder.unauthorized(exc.message, request_id=request_id)

        if isinstance(exc, (ForbiddenError, QuotaExceededError)):
            return ResponseBuilder.forbidden(
                exc.message,
                error=exc.error_code,
                details=exc.details,
                request_id=request_id,
            )

        if isinstance(exc, ValidationError):
            return ResponseBuilder.validation_error(
                message=exc.message,
                error=exc.error_code,
                details=exc.details,
                request_id=request_id,
            )

        return ResponseBuilder.internal_error(exc.message, request_id=request_id)

    @staticmethod
    def redirect(location: str, *, headers: dict[str, str] | None = None) -> JsonDict:
        """302 Found pointing the client at ``location``."""
        response_headers = ResponseBuilder._build_headers()
        response_headers["Location"] = location

        if headers:
            response_headers.update(headers)

        return {
            "statusCode": HTTPStatus.FOUND.value,
            "headers": response_headers,
            "body": "",
        }

    @staticmethod
    def binary_response(
        content: bytes,
        *,
        content_type: str,
        headers: dict[str, str] | None = None,
    ) -> JsonDict:
        response_headers: dict[str, str] = dict(ResponseBuilder.DEFAULT_CORS_HEADERS)
        response_headers.update(
            {
                "Content-Type": content_type,
                "Content-Length": str(len(content)),
            }
        )

        if headers:
            response_headers.update(headers)

        return {
            "statusCode": HTTPStatus.OK.value,
            "headers": response_headers,
            "body": base64.b64encode(content).decode("utf-8"),
            "isBase64Encoded": True,
        }
