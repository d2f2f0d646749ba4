"""
Lambda handler serving a random public image.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from imagehost.core.utils.constants import RANDOM_IMAGE_CACHE_CONTROL
from imagehost.core.utils.decorators import api_gateway_handler
from imagehost.core.utils.response import ResponseBuilder

from .models import RandomImageRequest
from .service import RandomImageService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle /random, /random/image and /random/redirect.

    Query parameters ``user_id`` and ``tags`` narrow the candidates. Only
    live public images are ever chosen and no authentication is needed.
    """
    logger.info(
        "Received random image request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "query_params": event.get("queryStringParameters"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    request = RandomImageRequest.from_event(event)
    service = RandomImageService()

    if request.mode == "redirect":
        location = service.random_location(request, event.get("headers"))
        return ResponseBuilder.redirect(location, headers={"Cache-Control": "no-store"})

    if request.mode == "image":
        content, mime_type, image = service.random_content(request)
        return ResponseBuilder.binary_response(
            content,
            content_type=mime_type,
            headers={
                "Cache-Control": RANDOM_IMAGE_CACHE_CONTROL,
                "X-Image-UUID": image.image_id,
            },
        )

    return ResponseBuilder.ok(service.random_metadata(request).model_dump())
