"""
Lambda handler returning embed links (URL, HTML, Markdown, BBCode) for an image.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from imagehost.core.utils.auth import require_identity
from imagehost.core.utils.decorators import api_gateway_handler
from imagehost.core.utils.response import ResponseBuilder

from .service import LinkService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    logger.info(
        "Received image links request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    identity = require_identity(event)
    image_id = (event.get("pathParameters") or {}).get("image_id") or ""

    links = LinkService().links_for(
        image_id,
        requester_id=identity.user_id,
        headers=event.get("headers"),
    )
    return ResponseBuilder.ok(links.model_dump())
