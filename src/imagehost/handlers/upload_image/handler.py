"""
Lambda handler responsible for batch image upload.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from imagehost.core.utils.auth import require_identity
from imagehost.core.utils.decorators import api_gateway_handler
from imagehost.core.utils.response import ResponseBuilder
from imagehost.core.utils.validators import parse_json_body, validate_request

from .models import ImageUploadRequest, ImageUploadResponse
from .service import UploadService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle image upload requests.

    Expected API Gateway event structure:
    {
        "body": "{\"files\": [{\"filename\": ..., \"mime_type\": ..., \"file\": <base64>}]}",
        "requestContext": {"authorizer": {"principalId": "<user id>"}}
    }

    Every file is processed in order. Files that fail are listed in
    ``errors`` while the rest are stored, so the response is 200 even when
    no file went through.
    """
    logger.info(
        "Received image upload request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
            "function_name": getattr(context, "function_name", None),
        },
    )

    identity = require_identity(event)
    request = validate_request(ImageUploadRequest, parse_json_body(event))

    result = UploadService().upload_batch(
        user_id=identity.user_id,
        items=request.to_upload_items(),
    )

    metrics.add_metric(name="ImagesCreated", unit=MetricUnit.Count, value=len(result.created))
    metrics.add_metric(name="ImagesDeduplicated", unit=MetricUnit.Count, value=len(result.deduped))
    metrics.add_metric(name="UploadsRejected", unit=MetricUnit.Count, value=len(result.errors))

    response = ImageUploadResponse.from_result(result)
    return ResponseBuilder.ok(response.model_dump())
