"""
Lambda handler responsible for deleting an image resource.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from imagehost.core.utils.auth import require_identity
from imagehost.core.utils.decorators import api_gateway_handler
from imagehost.core.utils.response import ResponseBuilder
from imagehost.core.utils.validators import validate_request

from .models import DeleteImageRequest, DeleteImageResponse
from .service import DeleteService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle image deletion requests.

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response
    """
    logger.info(
        "Received image delete request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
            "function_name": getattr(context, "function_name", None),
        },
    )

    identity = require_identity(event)
    path_params = event.get("pathParameters") or {}
    request = validate_request(DeleteImageRequest, {"image_id": path_params.get("image_id") or ""})

    deleted = DeleteService().delete_image(request.image_id, requester=identity)

    response = DeleteImageResponse(
        image_id=deleted.image_id,
        message="Image deleted successfully",
        deleted_at=deleted.deleted_at or "",
    )
    return ResponseBuilder.ok(response.model_dump())
