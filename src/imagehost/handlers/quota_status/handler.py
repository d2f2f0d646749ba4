"""
Lambda handler reporting the caller's storage usage against their quota.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from imagehost.core.utils.auth import require_identity
from imagehost.core.utils.decorators import api_gateway_handler
from imagehost.core.utils.response import ResponseBuilder

from .service import UsageService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Return ``used``, ``quota``, ``remaining`` and ``percent`` for the caller
    together with ``image_count`` and ``total_views``.

    ``remaining`` is -1 when the quota is unlimited (0).
    """
    logger.info(
        "Received usage request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    identity = require_identity(event)
    usage = UsageService().usage(identity.user_id)
    return ResponseBuilder.ok(usage.model_dump())
