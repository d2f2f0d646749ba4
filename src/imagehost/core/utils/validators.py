"""Request validation utilities."""

import json
from typing import Any, TypeVar

from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)


def sanitize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Sanitize Pydantic validation errors for API responses.

    Keeps only the field location and a readable message; drops ``url``,
    ``ctx`` and ``input`` so submitted file contents never echo back.
    """
    sanitized: list[dict[str, str]] = []

    for err in errors:
        field = ".".join(str(x) for x in err.get("loc", [])) or "body"
        msg = err.get("msg", "Invalid value").replace("Value error,", "").strip()

        msg_lower = msg.lower()
        if "base64" in msg_lower:
            msg = "File must be a valid Base64-encoded string"
        elif "field required" in msg_lower:
            msg = "This field is required"
        elif "extra inputs" in msg_lower:
            msg = "Unknown field"

        sanitized.append({"field": field, "message": msg})

    return sanitized


def parse_json_body(event: dict[str, Any]) -> dict[str, Any]:
    """Decode the JSON body of an API Gateway event.

    Raises:
        ValueError: If the body is not a JSON object
    """
    raw = event.get("body") or "{}"

    try:
        body = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("Invalid JSON body") from exc

    if not isinstance(body, dict):
        raise ValueError("Invalid JSON body: expected an object")

    return body


def validate_request(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    """Validate request data against a Pydantic model.

    Raises:
        pydantic.ValidationError: If the data does not satisfy the model
    """
    return model.model_validate(data)
