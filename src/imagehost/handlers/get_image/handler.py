"""
Lambda handler responsible for public image retrieval.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from imagehost.core.utils.auth import get_identity
from imagehost.core.utils.decorators import api_gateway_handler
from imagehost.core.utils.response import ResponseBuilder

from .models import GetImageRequest
from .service import GetService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle public image requests.

    - Default: return the image bytes (base64 encoded for API Gateway)
    - metadata=true: return the image metadata as JSON
    - download=true: serve the bytes as an attachment

    Authentication is optional. Anonymous callers only see public images;
    owners also see their own private ones.
    """
    logger.info(
        "Received image view request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "query_params": event.get("queryStringParameters"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    request = GetImageRequest.from_event(event)

    identity = get_identity(event)
    requester_id = identity.user_id if identity else None
    service = GetService()

    if request.metadata:
        image = service.get_metadata(request.image_id, requester_id=requester_id)
        return ResponseBuilder.ok(image.model_dump())

    content, mime_type, image = service.read_image(request.image_id, requester_id=requester_id)

    disposition = "attachment" if request.download else "inline"
    safe_name = image.original_name.replace('"', "")

    return ResponseBuilder.binary_response(
        content,
        content_type=mime_type,
        headers={
            "Content-Disposition": f'{disposition}; filename="{safe_name}"',
            "X-Image-UUID": image.image_id,
        },
    )
