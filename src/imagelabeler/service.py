"""Label request handling shared by the HTTP route and the Lambda handler."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from imagelabeler.api.schemas import ErrorResponse, LabelRequest, LabelResponse
from imagelabeler.image_source import decode_image_base64, fetch_image_bytes
from imagelabeler.labels import Label, normalize_label

if TYPE_CHECKING:
    import httpx

    from imagelabeler.config import Settings
    from imagelabeler.vision.detector import LabelDetector
    from imagelabeler.vision.pool import DetectorPool

logger = logging.getLogger(__name__)

CORS_HEADERS: dict[str, str] = {"Access-Control-Allow-Origin": "*"}

MISSING_IMAGE_MESSAGE = "Provide imageUrl or imageBase64"


class MissingImageError(ValueError):
    """Neither ``imageUrl`` nor ``imageBase64`` was supplied."""

    def __init__(self) -> None:
        super().__init__(MISSING_IMAGE_MESSAGE)


@dataclass(frozen=True)
class LabelOutcome:
    """Status code and JSON body of a label request."""

    status_code: int
    body: dict[str, Any]


def parse_label_request(raw: bytes | str | dict[str, Any] | None) -> LabelRequest:
    """Parse a request body.

    An empty body, or JSON that is not an object, carries no image fields
    and yields an empty request.

    Raises:
        ValueError: If the body is not valid JSON or its fields do not match the schema.
    """
    if raw is None or isinstance(raw, dict):
        data: Any = raw or {}
    elif not raw.strip():
        data = {}
    else:
        data = json.loads(raw)
    if not isinstance(data, dict):
        data = {}
    return LabelRequest.model_validate(data)


async def resolve_image_bytes(request: LabelRequest, http_client: httpx.AsyncClient, settings: Settings) -> bytes:
    """Return the image bytes for a request; inline base64 takes priority over a URL."""
    if request.image_base64:
        return decode_image_base64(request.image_base64, max_bytes=settings.max_image_bytes)
    if request.image_url:
        return await fetch_image_bytes(http_client, request.image_url, max_bytes=settings.max_image_bytes)
    raise MissingImageError


async def label_image(
    request: LabelRequest,
    *,
    detector: LabelDetector,
    pool: DetectorPool,
    http_client: httpx.AsyncClient,
    settings: Settings,
) -> list[Label]:
    """Resolve the image, run the detector once and return canonical labels."""
    image_bytes = await resolve_image_bytes(request, http_client, settings)
    raw_labels = await pool.run(detector.detect_labels, image_bytes)
    return [normalize_label(item) for item in raw_labels]


async def process_label_request(
    raw: bytes | str | dict[str, Any] | None,
    *,
    detector: LabelDetector,
    pool: DetectorPool,
    http_client: httpx.AsyncClient,
    settings: Settings,
) -> LabelOutcome:
    """Run one label request end to end and map the result to a status and body.

    A missing image is a 400; every other failure (bad JSON, bad base64,
    fetch error, vision service error) is a 500 carrying the exception message.
    """
    try:
        request = parse_label_request(raw)
        labels = await label_image(request, detector=detector, pool=pool, http_client=http_client, settings=settings)
    except MissingImageError as exc:
        logger.info("Rejected label request: %s", exc)
        return LabelOutcome(status_code=400, body=ErrorResponse(error=str(exc)).model_dump())
    except Exception as exc:
        logger.exception("Label request failed")
        return LabelOutcome(status_code=500, body=ErrorResponse(error=str(exc)).model_dump())

    logger.info("Detected labels: %s", [(label.name, label.confidence) for label in labels])
    return LabelOutcome(status_code=200, body=LabelResponse(labels=labels).model_dump())
