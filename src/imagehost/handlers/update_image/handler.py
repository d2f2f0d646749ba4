"""
Lambda handler responsible for partial updates of image metadata.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from imagehost.core.models.image import ImagePatch
from imagehost.core.utils.auth import require_identity
from imagehost.core.utils.decorators import api_gateway_handler
from imagehost.core.utils.response import ResponseBuilder
from imagehost.core.utils.validators import parse_json_body, validate_request

from .service import UpdateService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle PATCH requests on an image.

    Only the fields present in the body change. Sending ``null`` clears
    description or tags; ``is_public`` must be a boolean when present.
    """
    logger.info(
        "Received image update request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    identity = require_identity(event)
    image_id = (event.get("pathParameters") or {}).get("image_id") or ""
    patch = validate_request(ImagePatch, parse_json_body(event))

    image = UpdateService().update_image(image_id, patch, requester_id=identity.user_id)
    return ResponseBuilder.ok(image.model_dump())
