"""Best-effort image dimension detection."""

from typing import BinaryIO

from aws_lambda_powertools import Logger
from PIL import Image

logger = Logger(UTC=True)


def probe_dimensions(stream: BinaryIO) -> tuple[int, int]:
    """Return ``(width, height)`` read from the image header, or ``(0, 0)``.

    Only the header is parsed; pixel data is never decoded. The stream
    position is restored afterwards.
    """
    position = stream.tell()

    try:
        with Image.open(stream) as img:
            width, height = img.size
            return int(width), int(height)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Unable to read image dimensions", extra={"error": str(exc)})
        return 0, 0
    finally:
        stream.seek(position)
