"""AWS Lambda entry point behind an API Gateway proxy integration.

Same contract as ``POST /label``; the Rekognition client is created once per
warm container.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
from functools import lru_cache
from typing import Any

import httpx

from imagelabeler.config import LOG_FORMAT, Settings, get_settings
from imagelabeler.service import CORS_HEADERS, LabelOutcome, process_label_request
from imagelabeler.vision.detector import LabelDetector, RekognitionLabelDetector
from imagelabeler.vision.pool import DetectorPool

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _settings() -> Settings:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
    return settings


@lru_cache(maxsize=1)
def _detector() -> LabelDetector:
    return RekognitionLabelDetector(_settings())


async def _handle(body: Any, settings: Settings, detector: LabelDetector) -> LabelOutcome:
    pool = DetectorPool(settings)
    try:
        async with httpx.AsyncClient(timeout=settings.fetch_timeout, follow_redirects=True) as http_client:
            return await process_label_request(
                body,
                detector=detector,
                pool=pool,
                http_client=http_client,
                settings=settings,
            )
    finally:
        pool.shutdown()


def _event_body(event: dict[str, Any]) -> Any:
    body = event.get("body")
    if isinstance(body, str) and event.get("isBase64Encoded"):
        return base64.b64decode(body)
    return body


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    """Handle one invocation; ``event["body"]`` may be a JSON string or an object."""
    outcome = asyncio.run(_handle(_event_body(event), _settings(), _detector()))
    logger.info("Label invocation finished with status %s", outcome.status_code)
    return {
        "statusCode": outcome.status_code,
        "headers": dict(CORS_HEADERS),
        "body": json.dumps(outcome.body),
    }
