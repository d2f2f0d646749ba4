"""
Lambda handler for reading and updating the caller's settings.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from imagehost.core.utils.auth import require_identity
from imagehost.core.utils.decorators import api_gateway_handler
from imagehost.core.utils.response import ResponseBuilder
from imagehost.core.utils.validators import parse_json_body, validate_request

from .models import SettingsPatch
from .service import SettingsService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle /user/settings.

    - GET: return the caller's settings (defaults when no profile is stored)
    - PUT or PATCH: change only the fields present in the body
    """
    logger.info(
        "Received user settings request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    identity = require_identity(event)
    service = SettingsService()

    if event.get("httpMethod") == "GET":
        return ResponseBuilder.ok(service.get_settings(identity.user_id).model_dump())

    patch = validate_request(SettingsPatch, parse_json_body(event))
    settings = service.update_settings(identity.user_id, patch)
    return ResponseBuilder.ok(settings.model_dump())
