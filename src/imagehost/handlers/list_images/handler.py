"""
Lambda handler responsible for listing and searching the caller's images.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from imagehost.core.utils.auth import require_identity
from imagehost.core.utils.decorators import api_gateway_handler
from imagehost.core.utils.response import ResponseBuilder
from imagehost.core.utils.validators import validate_request

from .models import ListImagesRequest
from .service import ListService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle requests to list images.

    Supports:
    - Keyword search over name, description and tags
    - Newest-first ordering
    - Offset-based pagination

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response
    """
    logger.info(
        "Received image list request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "query_params": event.get("queryStringParameters"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    identity = require_identity(event)
    request = validate_request(ListImagesRequest, event.get("queryStringParameters") or {})

    response = ListService().list_images(
        user_id=identity.user_id,
        keyword=request.keyword,
        offset=request.offset,
        limit=request.limit,
    )
    return ResponseBuilder.ok(response.model_dump())
