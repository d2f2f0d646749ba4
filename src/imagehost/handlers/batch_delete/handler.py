"""
Lambda handler responsible for deleting several images at once.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from imagehost.core.utils.auth import require_identity
from imagehost.core.utils.decorators import api_gateway_handler
from imagehost.core.utils.response import ResponseBuilder
from imagehost.core.utils.validators import parse_json_body, validate_request
from imagehost.handlers.delete_image.models import BatchDeleteRequest, BatchDeleteResponse
from imagehost.handlers.delete_image.service import DeleteService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle batch delete requests.

    Ids that do not exist, are already deleted or belong to someone else
    are reported as skipped instead of failing the request.
    """
    logger.info(
        "Received batch delete request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    identity = require_identity(event)
    request = validate_request(BatchDeleteRequest, parse_json_body(event))

    deleted, skipped = DeleteService().delete_images(request.image_ids, requester=identity)

    response = BatchDeleteResponse(
        deleted_count=len(deleted),
        deleted=deleted,
        skipped=skipped,
        message=f"{len(deleted)} images deleted",
    )
    return ResponseBuilder.ok(response.model_dump())
